"""
SQLAlchemy Models Package

This package contains all database models for the Recipes API.

Model Relationships:
- User <-> AuthSession: One-to-Many (a user keeps the history of its
                        sessions, at most one of them active)
- Recipe: standalone document, no relationships

Import all models here to:
1. Make them available as: from app.models import Recipe, User
2. Ensure Alembic discovers them for migrations
"""

from app.models.recipe import Recipe
from app.models.user import User
from app.models.session import AuthSession, SessionState

__all__ = [
    "Recipe",
    "User",
    "AuthSession",
    "SessionState",
]
