"""
Recipe Model

A recipe document: a name plus three ordered lists of strings.

SQLAlchemy 2.0 Features Used:
- mapped_column(): New way to define columns with full type support
- Mapped[]: Type hint wrapper for SQLAlchemy columns
- JSON: list-valued fields are kept whole inside the row
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Recipe(Base):
    """
    Recipe model.

    Table: recipes

    The id is a 32 character hex string assigned by the application at
    creation time. It and published_at are never written again after insert.

    Example:
        recipe = Recipe(
            id=uuid.uuid4().hex,
            name="Tea",
            tags=["drink"],
            ingredients=["water", "tea leaves"],
            instructions=["boil", "steep"],
            published_at=datetime.now(UTC),
        )
    """

    __tablename__ = "recipes"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        comment="Hex identifier assigned at creation"
    )

    # -------------------------------------------------------------------------
    # Document Fields
    # -------------------------------------------------------------------------
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Recipe name"
    )

    tags: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered list of tags"
    )

    ingredients: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered list of ingredients"
    )

    instructions: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered list of instruction steps"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="When the recipe was created"
    )

    def __repr__(self) -> str:
        """Developer-friendly string representation."""
        return f"Recipe(id='{self.id}', name='{self.name}')"
