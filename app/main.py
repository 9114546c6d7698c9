"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application.

Key Concepts:
=============

1. Application Factory Pattern
   - create_app() function returns configured app
   - Tests import the module-level app and override dependencies

2. Lifespan Events
   - startup: log configuration
   - shutdown: close the Redis connection pool

3. Exception Handlers
   - RecipesAPIError subclasses map to 400/401/404/500
   - Request validation failures are 400, not FastAPI's default 422
   - Infrastructure failures are logged, clients get a generic message
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings
from app.dependencies import CacheDep, DbSession
from app.exceptions import AuthenticationError, InfrastructureError, RecipesAPIError
from app.routers import auth_router, recipes_router
from app.services.cache import close_redis_connection
from app.services.rate_limiter import limiter, rate_limit_exceeded_handler

# =============================================================================
# Logging Configuration
# =============================================================================
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Code before yield runs on startup, code after yield on shutdown.
    The Redis client connects lazily, so startup does not fail when Redis
    is down; /health reports it instead.
    """
    logger.info(f"Starting {settings.app_name} {settings.app_version}...")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Listing cache key: {settings.recipes_cache_key!r}")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    close_redis_connection()


# =============================================================================
# Application Factory
# =============================================================================
def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## Recipes API

Create, list, update, delete and search recipes.

### Authentication
`POST /signin` returns a session token. Send it as
`Authorization: Bearer <token>` on `POST`, `PUT` and `DELETE /recipes`.
Tokens expire after a few minutes; use `POST /refresh` to rotate them and
`POST /signout` to revoke them.

### Caching
`GET /recipes` is served from Redis and refreshed after every write.
        """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(RecipesAPIError)
    async def recipes_api_exception_handler(
        request: Request,
        exc: RecipesAPIError,
    ) -> JSONResponse:
        """
        Convert application errors to HTTP responses.

        Infrastructure errors are logged with their cause and answered with
        a generic message.
        """
        headers = None
        if isinstance(exc, InfrastructureError):
            logger.error(
                f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}",
                exc_info=exc.__cause__,
            )
        elif isinstance(exc, AuthenticationError):
            headers = {"WWW-Authenticate": "Bearer"}

        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.public_detail},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Malformed bodies and query parameters are a 400."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """
        Catch-all exception handler.

        In production, hide internal errors from users.
        In debug mode, show more details.
        """
        logger.error(f"Unhandled error: {exc}", exc_info=True)

        if settings.debug:
            return JSONResponse(
                status_code=500,
                content={"detail": str(exc)},
            )

        return JSONResponse(
            status_code=500,
            content={"detail": "An internal error occurred."},
        )

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    app.include_router(recipes_router)
    app.include_router(auth_router)

    # -------------------------------------------------------------------------
    # Health Check Endpoint
    # -------------------------------------------------------------------------
    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
        description="Report whether the record store and cache are reachable.",
    )
    def health_check(db: DbSession, cache: CacheDep) -> dict:
        """
        Health check endpoint.

        Used by load balancers and monitoring. Always answers 200; the body
        says which collaborator is down.
        """
        try:
            db.execute(text("SELECT 1"))
            database_ok = True
        except SQLAlchemyError as e:
            logger.warning(f"Health check: database unreachable: {e}")
            database_ok = False

        cache_ok = cache.ping()

        return {
            "status": "healthy" if database_ok and cache_ok else "degraded",
            "app": settings.app_name,
            "version": settings.app_version,
            "database": "connected" if database_ok else "disconnected",
            "cache": "connected" if cache_ok else "disconnected",
        }

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Welcome message and API information.",
    )
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================
# This is what uvicorn imports: uvicorn app.main:app

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
