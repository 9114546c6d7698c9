"""
Application Exceptions

Every failure the services raise belongs to one of four kinds, each with a
fixed HTTP status. Routers and services raise these; the handlers registered
in main.py turn them into JSON responses.

Taxonomy:
- ValidationError (400): malformed request body or identifier
- NotFoundError (404): no recipe for the given id
- AuthenticationError (401): bad credentials or an unusable session token
- InfrastructureError (500): the record store, cache or session store failed

Infrastructure failures carry their cause for logging, but the client only
ever sees a generic message.
"""

from fastapi import status


class RecipesAPIError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "An internal error occurred."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def public_detail(self) -> str:
        """Message safe to return to the caller."""
        return self.detail


class ValidationError(RecipesAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request."


class NotFoundError(RecipesAPIError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found."


class AuthenticationError(RecipesAPIError):
    """
    Raised for wrong credentials and for unknown, expired or revoked tokens.

    The message never reveals whether the identity exists.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated."


class InfrastructureError(RecipesAPIError):
    """A collaborator (record store, cache, session store) failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "A backend service is unavailable. Please try again later."

    @property
    def public_detail(self) -> str:
        return self.default_detail


class RecordStoreError(InfrastructureError):
    pass


class CacheError(InfrastructureError):
    pass


class SessionStoreError(InfrastructureError):
    pass
