"""
API Routers Package

This package contains FastAPI routers that handle API endpoints.

Router Structure:
- recipes.py: /recipes/* endpoints (list, search, CRUD)
- auth.py: /signin, /refresh, /signout

Each router is imported and registered in main.py.
"""

from app.routers.auth import router as auth_router
from app.routers.recipes import router as recipes_router

__all__ = [
    "auth_router",
    "recipes_router",
]
