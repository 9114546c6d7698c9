"""
Recipes API Application Package

A REST service for recipe records with a cache-aside listing and
session-token authentication for writes.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy engine and per-request sessions
- exceptions.py: Error taxonomy mapped to HTTP status codes
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions and the auth gate
- models/: SQLAlchemy ORM models (recipes, users, sessions)
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Record store, cache, listing cache, sessions, rate limiting
"""

__version__ = "1.0.0"
