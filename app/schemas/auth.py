"""
Authentication Pydantic Schemas

Request/response bodies for /signin, /refresh and /signout.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SignInRequest(BaseModel):
    """Schema for POST /signin."""

    username: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Account username",
        examples=["admin"],
    )

    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Account password",
    )


class TokenRequest(BaseModel):
    """
    Optional body for /refresh and /signout.

    When omitted the token is read from the Authorization header or the
    session cookie instead.
    """

    token: str | None = Field(
        default=None,
        description="Session token previously returned by /signin or /refresh",
    )


class TokenResponse(BaseModel):
    """Schema for an issued session token."""

    token: str = Field(..., description="Session token (send as Bearer token)")
    expires: datetime = Field(..., description="When the token stops being accepted")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "expires": "2024-01-15T10:40:00Z",
            }
        }
    )
