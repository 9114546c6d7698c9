"""
Auth Session Model

Server-side record behind every issued session token.

State Machine:
==============
    ACTIVE ──sign-out / refresh / new sign-in──▶ REVOKED
    ACTIVE ──expires_at reached──────────────────▶ EXPIRED

REVOKED and EXPIRED are terminal. A refreshed session is REVOKED with
replaced_by pointing at its successor. Only ACTIVE sessions whose
expires_at is still in the future pass the authentication gate, and that
decision lives in is_usable() and nowhere else.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.user import User


class SessionState(str, Enum):
    """Lifecycle states of a session."""
    ACTIVE = "active"
    REVOKED = "revoked"
    EXPIRED = "expired"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timezone-aware columns back as naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class AuthSession(Base):
    """
    Auth session model.

    Table: auth_sessions

    The id is the random session identifier carried in the token's "sid"
    claim. Rows are never deleted so a replayed token always finds its
    terminal state.
    """

    __tablename__ = "auth_sessions"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Random session identifier embedded in the token"
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    state: Mapped[str] = mapped_column(
        String(16),
        default=SessionState.ACTIVE.value,
        nullable=False,
        index=True,
        comment="active, revoked or expired"
    )

    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    replaced_by: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        comment="Session that superseded this one on refresh"
    )

    user: Mapped["User"] = relationship("User", back_populates="sessions")

    # -------------------------------------------------------------------------
    # State helpers
    # -------------------------------------------------------------------------
    @property
    def session_state(self) -> SessionState:
        return SessionState(self.state)

    def is_expired(self, now: datetime) -> bool:
        return _as_utc(self.expires_at) <= now

    def is_usable(self, now: datetime) -> bool:
        """True only for an ACTIVE session that has not reached expires_at."""
        return self.session_state is SessionState.ACTIVE and not self.is_expired(now)

    def revoke(self, now: datetime, replaced_by: str | None = None) -> None:
        self.state = SessionState.REVOKED.value
        self.revoked_at = now
        self.replaced_by = replaced_by

    def expire(self) -> None:
        self.state = SessionState.EXPIRED.value

    def __repr__(self) -> str:
        """Developer-friendly string representation."""
        return f"AuthSession(id='{self.id[:8]}...', user_id={self.user_id}, state='{self.state}')"
