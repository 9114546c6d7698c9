"""
Recipe Store Service

Document-style access to recipes: insert, find all, find by id, update
fields and delete.

Every SQLAlchemy failure is rolled back and re-raised as RecordStoreError
so routers can answer with a generic 500 instead of leaking driver errors.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import RecordStoreError, ValidationError
from app.models.recipe import Recipe

logger = logging.getLogger(__name__)

# Fields PUT /recipes/{id} may change; id and published_at never change
UPDATABLE_FIELDS = ("name", "tags", "ingredients", "instructions")


def new_recipe_id() -> str:
    return uuid.uuid4().hex


def parse_recipe_id(value: str) -> str:
    """
    Normalize a recipe id taken from a URL.

    Accepts the 32 hex character form (and the hyphenated UUID form).

    Raises:
        ValidationError: If value is not a well-formed id
    """
    try:
        return uuid.UUID(value).hex
    except (ValueError, TypeError, AttributeError):
        raise ValidationError(f"Invalid recipe id: {value!r}")


class RecipeStore:
    """
    Recipe persistence bound to one database session.

    Args:
        db: Request-scoped SQLAlchemy session
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _fail(self, action: str, exc: SQLAlchemyError) -> RecordStoreError:
        self.db.rollback()
        logger.error(f"Record store {action} failed: {exc}")
        return RecordStoreError(f"Record store {action} failed")

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    def insert(self, fields: dict[str, Any]) -> Recipe:
        """
        Insert a new recipe, assigning its id and publication time.

        Args:
            fields: name, tags, ingredients, instructions

        Returns:
            The stored Recipe
        """
        recipe = Recipe(
            id=new_recipe_id(),
            name=fields["name"],
            tags=list(fields.get("tags") or []),
            ingredients=list(fields.get("ingredients") or []),
            instructions=list(fields.get("instructions") or []),
            published_at=datetime.now(UTC),
        )
        try:
            self.db.add(recipe)
            self.db.commit()
            self.db.refresh(recipe)
        except SQLAlchemyError as e:
            raise self._fail("insert", e) from e

        logger.info(f"Inserted recipe {recipe.id} ({recipe.name})")
        return recipe

    def update_fields(self, recipe_id: str, fields: dict[str, Any]) -> int:
        """
        Overwrite the updatable fields of one recipe.

        Returns:
            Number of recipes matched (0 or 1)
        """
        values = {key: fields[key] for key in UPDATABLE_FIELDS if key in fields}
        stmt = update(Recipe).where(Recipe.id == recipe_id).values(**values)
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("update", e) from e

        logger.info(f"Updated recipe {recipe_id} (matched={result.rowcount})")
        return result.rowcount

    def delete(self, recipe_id: str) -> int:
        """
        Delete one recipe.

        Returns:
            Number of recipes deleted (0 or 1)
        """
        stmt = delete(Recipe).where(Recipe.id == recipe_id)
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete", e) from e

        logger.info(f"Deleted recipe {recipe_id} (deleted={result.rowcount})")
        return result.rowcount

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def find_all(self) -> list[Recipe]:
        """Return every recipe, oldest first."""
        stmt = select(Recipe).order_by(Recipe.published_at, Recipe.id)
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise self._fail("query", e) from e

    def find_by_id(self, recipe_id: str) -> Recipe | None:
        stmt = select(Recipe).where(Recipe.id == recipe_id)
        try:
            return self.db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("lookup", e) from e

