"""
Recipe Pydantic Schemas

Request and response shapes for /recipes.

The response uses camelCase "publishedAt" on the wire to match the JSON
documents clients already consume, while Python code uses published_at.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from app.models.recipe import Recipe


class RecipeBase(BaseModel):
    """
    Fields a client may send when creating or replacing a recipe.

    Lists keep the order the client sent; blank entries are dropped.
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Recipe name",
        examples=["Tea", "Pancakes"],
    )

    tags: list[str] = Field(
        default_factory=list,
        description="Tags used by /recipes/search",
        examples=[["drink", "hot"]],
    )

    ingredients: list[str] = Field(
        default_factory=list,
        description="Ingredients in the order they are used",
        examples=[["water", "tea leaves"]],
    )

    instructions: list[str] = Field(
        default_factory=list,
        description="Preparation steps in order",
        examples=[["boil", "steep"]],
    )

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        """Validate and normalize name."""
        if not v.strip():
            raise ValueError("Name cannot be empty or whitespace")
        return v.strip()

    @field_validator("tags", "ingredients", "instructions")
    @classmethod
    def drop_blank_entries(cls, v: list[str]) -> list[str]:
        return [item.strip() for item in v if item.strip()]


class RecipeCreate(RecipeBase):
    """Schema for POST /recipes."""
    pass


class RecipeUpdate(RecipeBase):
    """
    Schema for PUT /recipes/{id}.

    PUT replaces name, tags, ingredients and instructions as a whole.
    id and publishedAt cannot be changed.
    """
    pass


class RecipeResponse(RecipeBase):
    """Schema for a recipe returned by the API and stored in the cache."""

    id: str = Field(..., description="Recipe identifier")

    published_at: datetime = Field(
        ...,
        alias="publishedAt",
        description="When the recipe was created",
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "3f0c2a9a7d3b4e61b2f5c8d9e0a1b2c3",
                "name": "Tea",
                "tags": ["drink"],
                "ingredients": ["water", "tea leaves"],
                "instructions": ["boil", "steep"],
                "publishedAt": "2024-01-15T10:30:00Z",
            }
        },
    )

    @classmethod
    def from_model(cls, recipe: Recipe) -> "RecipeResponse":
        return cls(
            id=recipe.id,
            name=recipe.name,
            tags=list(recipe.tags or []),
            ingredients=list(recipe.ingredients or []),
            instructions=list(recipe.instructions or []),
            published_at=recipe.published_at,
        )


class MessageResponse(BaseModel):
    """Confirmation body for update, delete and sign-out."""

    message: str = Field(..., examples=["Recipe has been updated"])


# Used to encode/decode the cached listing
RecipeListAdapter = TypeAdapter(list[RecipeResponse])
