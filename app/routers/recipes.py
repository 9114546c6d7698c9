"""
Recipes Router

CRUD and tag search endpoints for recipes.

Reads of the full collection go through the cache-aside RecipeListing.
Single-recipe reads and all writes go straight to the RecipeStore; every
successful write is followed by RecipeListing.invalidate().

Write endpoints depend on CurrentSession, so the authentication gate runs
before the handler touches the store.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import CurrentSession, ListingDep, RecipeStoreDep
from app.exceptions import NotFoundError
from app.schemas import MessageResponse, RecipeCreate, RecipeResponse, RecipeUpdate
from app.services.recipe_store import parse_recipe_id

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/recipes",
    tags=["Recipes"],
    responses={
        400: {"description": "Invalid input"},
        404: {"description": "Recipe not found"},
    },
)


def recipe_not_found(recipe_id: str) -> NotFoundError:
    return NotFoundError(f"Recipe with id {recipe_id} not found")


# =============================================================================
# Read Endpoints
# =============================================================================

@router.get(
    "",
    response_model=list[RecipeResponse],
    summary="List recipes",
    description="Return every recipe. Served from the cache when it is warm.",
)
def list_recipes(listing: ListingDep) -> list[RecipeResponse]:
    return listing.get_listing()


# Registered before /{recipe_id} so "search" is not taken for an id
@router.get(
    "/search",
    response_model=list[RecipeResponse],
    summary="Search recipes by tag",
    description="Return the recipes carrying the given tag (case-insensitive).",
)
def search_recipes(
    listing: ListingDep,
    tag: Annotated[str, Query(description="Tag to match", examples=["drink"])] = "",
) -> list[RecipeResponse]:
    """
    Filter the full listing by tag.

    The filter runs in memory over the (possibly cached) listing; search
    results themselves are never cached. A missing or empty tag matches
    nothing.
    """
    return listing.search(tag)


@router.get(
    "/{recipe_id}",
    response_model=RecipeResponse,
    summary="Get a recipe by ID",
    description="Retrieve a single recipe directly from the record store.",
)
def get_recipe(recipe_id: str, store: RecipeStoreDep) -> RecipeResponse:
    """
    Get a single recipe.

    Raises:
        ValidationError: 400 if recipe_id is malformed
        NotFoundError: 404 if no recipe has this id
    """
    normalized = parse_recipe_id(recipe_id)
    recipe = store.find_by_id(normalized)
    if recipe is None:
        raise recipe_not_found(recipe_id)
    return RecipeResponse.from_model(recipe)


# =============================================================================
# Write Endpoints
# =============================================================================

@router.post(
    "",
    response_model=RecipeResponse,
    summary="Create a recipe",
    description="Create a new recipe. Requires a session token.",
)
def create_recipe(
    recipe_data: RecipeCreate,
    session: CurrentSession,
    store: RecipeStoreDep,
    listing: ListingDep,
) -> RecipeResponse:
    """
    Create a recipe.

    The store assigns the id and publishedAt. The cached listing is dropped
    only once the insert has committed.
    """
    recipe = store.insert(recipe_data.model_dump())
    listing.invalidate()

    logger.info(f"Recipe {recipe.id} created by {session.user.username}")
    return RecipeResponse.from_model(recipe)


@router.put(
    "/{recipe_id}",
    response_model=MessageResponse,
    summary="Update a recipe",
    description="Replace name, tags, ingredients and instructions. Requires a session token.",
)
def update_recipe(
    recipe_id: str,
    recipe_data: RecipeUpdate,
    session: CurrentSession,
    store: RecipeStoreDep,
    listing: ListingDep,
) -> MessageResponse:
    """
    Update a recipe.

    An id that matches nothing is a 404 and leaves the cache alone.
    """
    normalized = parse_recipe_id(recipe_id)
    matched = store.update_fields(normalized, recipe_data.model_dump())
    if matched == 0:
        raise recipe_not_found(recipe_id)

    listing.invalidate()

    logger.info(f"Recipe {normalized} updated by {session.user.username}")
    return MessageResponse(message="Recipe has been updated")


@router.delete(
    "/{recipe_id}",
    response_model=MessageResponse,
    summary="Delete a recipe",
    description="Permanently delete a recipe. Requires a session token.",
)
def delete_recipe(
    recipe_id: str,
    session: CurrentSession,
    store: RecipeStoreDep,
    listing: ListingDep,
) -> MessageResponse:
    normalized = parse_recipe_id(recipe_id)
    deleted = store.delete(normalized)
    if deleted == 0:
        raise recipe_not_found(recipe_id)

    listing.invalidate()

    logger.info(f"Recipe {normalized} deleted by {session.user.username}")
    return MessageResponse(message="Recipe has been deleted")
