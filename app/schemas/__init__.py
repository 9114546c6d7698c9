"""
Pydantic Schemas Package

This package contains Pydantic models for request/response validation.

WHY Separate Schemas from SQLAlchemy Models?
============================================
1. Security: Control exactly what data is exposed in API responses
2. Validation: Different rules for create vs update vs response
3. Decoupling: Database schema can evolve independently of API
4. Documentation: Schemas generate OpenAPI documentation

Schema Naming Convention:
- XxxBase: Shared fields between create/update
- XxxCreate: Fields required when creating a new record
- XxxUpdate: Fields allowed when updating
- XxxResponse: Fields returned in API responses
"""

from app.schemas.auth import SignInRequest, TokenRequest, TokenResponse
from app.schemas.recipe import (
    MessageResponse,
    RecipeBase,
    RecipeCreate,
    RecipeListAdapter,
    RecipeResponse,
    RecipeUpdate,
)

__all__ = [
    "RecipeBase",
    "RecipeCreate",
    "RecipeUpdate",
    "RecipeResponse",
    "RecipeListAdapter",
    "MessageResponse",
    "SignInRequest",
    "TokenRequest",
    "TokenResponse",
]
