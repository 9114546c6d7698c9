"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

WHY Dependency Injection?
=========================
1. Reusability: Write once, use in many routes
2. Testing: app.dependency_overrides swaps the database or Redis client
3. Separation of Concerns: Routes only orchestrate services
4. Lifecycle Management: FastAPI handles creation/cleanup

Collaborators:
- Redis client: process-wide, created once (get_redis)
- Database session: one per request (get_db)
- RecipeStore, RecipeListing, SessionManager: cheap per-request wrappers
  around those two
"""

from typing import Annotated

import redis
from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.session import AuthSession
from app.services.cache import Cache, get_redis_client
from app.services.listing import RecipeListing
from app.services.recipe_store import RecipeStore
from app.services.sessions import SessionManager

settings = get_settings()

# =============================================================================
# Collaborators
# =============================================================================
DbSession = Annotated[Session, Depends(get_db)]


def get_redis() -> redis.Redis:
    """Process-wide Redis client."""
    return get_redis_client()


def get_cache(client: Annotated[redis.Redis, Depends(get_redis)]) -> Cache:
    return Cache(client)


def get_recipe_store(db: DbSession) -> RecipeStore:
    return RecipeStore(db)


def get_listing(
    store: Annotated[RecipeStore, Depends(get_recipe_store)],
    cache: Annotated[Cache, Depends(get_cache)],
) -> RecipeListing:
    return RecipeListing(store, cache)


def get_session_manager(db: DbSession) -> SessionManager:
    return SessionManager(db)


CacheDep = Annotated[Cache, Depends(get_cache)]
RecipeStoreDep = Annotated[RecipeStore, Depends(get_recipe_store)]
ListingDep = Annotated[RecipeListing, Depends(get_listing)]
SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]


# =============================================================================
# Session Token Extraction
# =============================================================================
# HTTPBearer reads "Authorization: Bearer <token>" and adds the "Authorize"
# button to Swagger UI. auto_error=False lets the cookie act as a fallback
# and lets the gate produce its own 401.
bearer_scheme = HTTPBearer(auto_error=False)


def get_session_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session_cookie: Annotated[str | None, Cookie(alias=settings.session_cookie_name)] = None,
) -> str | None:
    """
    Find the session token on the request.

    Order:
    1. Authorization: Bearer <token>
    2. Session cookie

    Returns:
        The token string, or None if the request carries none
    """
    if credentials and credentials.credentials:
        return credentials.credentials
    return session_cookie


SessionToken = Annotated[str | None, Depends(get_session_token)]


# =============================================================================
# Authentication Gate
# =============================================================================
def require_session(
    token: SessionToken,
    manager: SessionManagerDep,
) -> AuthSession:
    """
    Gate for mutating routes.

    Resolves before the route body runs, so an unauthenticated request never
    reaches the record store.

    Raises:
        AuthenticationError: 401 if the token is missing or its session is
            not active
    """
    return manager.authenticate(token)


CurrentSession = Annotated[AuthSession, Depends(require_session)]
