"""
Security Service

Handles password hashing and session token encoding.

Security Features:
==================
1. Password hashing with bcrypt (passlib)
2. Signed session tokens (JWT, HS256)
3. Constant-time password verification, including for unknown users

A token only proves it was signed by this service and has not passed its
"exp" claim. Whether the session behind it is still active is decided by
app.services.sessions against the auth_sessions table.

Usage:
    from app.services.security import hash_password, verify_password

    hashed = hash_password("SecurePass123")
    is_valid = verify_password("SecurePass123", hashed)
"""

import logging
from datetime import datetime

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# -------------------------------------------------------------------------
# Password Hashing Configuration
# -------------------------------------------------------------------------
# - schemes: bcrypt only
# - deprecated: "auto" means old hashes are automatically upgraded
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Example:
        >>> hashed = hash_password("SecurePass123")
        >>> hashed.startswith("$2b$")
        True
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Example:
        >>> hashed = hash_password("SecurePass123")
        >>> verify_password("SecurePass123", hashed)
        True
        >>> verify_password("WrongPassword", hashed)
        False
    """
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """Spend the time of one hash check; used when the user does not exist."""
    pwd_context.dummy_verify()


# -------------------------------------------------------------------------
# Session Token Configuration
# -------------------------------------------------------------------------
ALGORITHM = "HS256"
TOKEN_TYPE = "session"


def create_session_token(
    username: str,
    session_id: str,
    issued_at: datetime,
    expires_at: datetime,
) -> str:
    """
    Create a signed session token.

    Claims:
        sub: username
        sid: server-side session id
        iat/exp: issue and expiry times

    Returns:
        Encoded JWT string
    """
    to_encode = {
        "sub": username,
        "sid": session_id,
        "iat": issued_at,
        "exp": expires_at,
        "type": TOKEN_TYPE,
    }

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=ALGORITHM,
    )


def decode_session_token(token: str, verify_exp: bool = True) -> dict | None:
    """
    Decode and validate a session token.

    Args:
        token: The JWT string
        verify_exp: Reject tokens past their "exp" claim. Sign-out turns
            this off so an expired token can still be revoked.

    Returns:
        Decoded payload if the signature and type are valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM],
            options={"verify_exp": verify_exp},
        )
    except JWTError as e:
        logger.warning(f"Session token rejected: {e}")
        return None

    if payload.get("type") != TOKEN_TYPE or not payload.get("sid"):
        logger.warning("Session token has unexpected claims")
        return None

    return payload
