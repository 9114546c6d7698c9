"""
Authentication Router

Handles session endpoints:
- Sign-in (username/password → session token)
- Refresh (live token → new token, old one revoked)
- Sign-out (revoke the session)

Security:
=========
- Passwords are checked against bcrypt hashes and never logged
- Wrong username and wrong password produce the same 401
- The token is returned in the body and also set as an httpOnly cookie
- Each token is backed by a server-side session that can be revoked
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Request, Response

from app.config import get_settings
from app.dependencies import SessionManagerDep, SessionToken
from app.schemas import MessageResponse, SignInRequest, TokenRequest, TokenResponse
from app.services.rate_limiter import limiter
from app.services.sessions import IssuedToken

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    tags=["Authentication"],
    responses={
        401: {"description": "Unauthorized"},
    },
)


def set_session_cookie(response: Response, issued: IssuedToken) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=issued.token,
        httponly=True,  # Not accessible via JavaScript
        secure=settings.is_production,  # HTTPS only in production
        samesite="lax",  # CSRF protection
        expires=issued.expires_at,
    )


def token_response(response: Response, issued: IssuedToken) -> TokenResponse:
    set_session_cookie(response, issued)
    return TokenResponse(token=issued.token, expires=issued.expires_at)


def pick_token(body: TokenRequest | None, request_token: str | None) -> str | None:
    """Prefer a token sent in the body over the header/cookie one."""
    if body is not None and body.token:
        return body.token
    return request_token


# -------------------------------------------------------------------------
# Sign-in Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/signin",
    response_model=TokenResponse,
    summary="Sign in with username and password",
    description="""
    Authenticate and receive a session token.

    Send the token on protected requests as:
    ```
    Authorization: Bearer <token>
    ```
    Signing in again revokes the previous session of the same user.
    """,
)
@limiter.limit(settings.rate_limit_signin)
def sign_in(
    request: Request,
    response: Response,
    credentials: SignInRequest,
    manager: SessionManagerDep,
) -> TokenResponse:
    issued = manager.sign_in(credentials.username, credentials.password)
    return token_response(response, issued)


# -------------------------------------------------------------------------
# Refresh Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh a session token",
    description="""
    Exchange a live session token for a new one.

    The token may be sent in the body (`{"token": ...}`), as a Bearer
    header, or as the session cookie. The old token stops working.
    """,
)
def refresh(
    response: Response,
    manager: SessionManagerDep,
    request_token: SessionToken,
    body: Annotated[TokenRequest | None, Body()] = None,
) -> TokenResponse:
    issued = manager.refresh(pick_token(body, request_token))
    return token_response(response, issued)


# -------------------------------------------------------------------------
# Sign-out Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/signout",
    response_model=MessageResponse,
    summary="Sign out",
    description="Revoke the current session. Always succeeds.",
)
def sign_out(
    response: Response,
    manager: SessionManagerDep,
    request_token: SessionToken,
    body: Annotated[TokenRequest | None, Body()] = None,
) -> MessageResponse:
    manager.sign_out(pick_token(body, request_token))
    response.delete_cookie(settings.session_cookie_name)
    return MessageResponse(message="Signed out")
