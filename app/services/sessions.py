"""
Session Service

Sign-in, token refresh, sign-out and the authentication gate.

Lifecycle:
==========
- sign_in: verify username/password, revoke the user's previous session,
  issue a new ACTIVE session
- refresh: exchange a token of an ACTIVE, unexpired session for a new one;
  the old session becomes REVOKED and points at its replacement
- sign_out: mark the token's session REVOKED; repeating it is harmless
- authenticate: the gate for protected routes; only an ACTIVE session that
  has not reached expires_at passes

Unknown, expired and revoked tokens all fail with the same
AuthenticationError. Database failures surface as SessionStoreError so a
client can tell "wrong credentials" apart from "service unavailable".
"""

import logging
import secrets
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import AuthenticationError, SessionStoreError
from app.models.session import AuthSession, SessionState
from app.models.user import User
from app.services.security import (
    create_session_token,
    decode_session_token,
    dummy_verify,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"
INVALID_TOKEN = "Invalid or expired session token"


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime
    session_id: str


def utcnow() -> datetime:
    return datetime.now(UTC)


class SessionManager:
    """
    Session lifecycle bound to one database session.

    Args:
        db: Request-scoped SQLAlchemy session holding users and sessions
        lifetime: How long an issued token stays valid
            (defaults to settings.session_expire_minutes)
        clock: Returns the current UTC time; replaced in tests
    """

    def __init__(
        self,
        db: Session,
        lifetime: timedelta | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.lifetime = lifetime or timedelta(minutes=get_settings().session_expire_minutes)
        self.clock = clock

    @contextmanager
    def _session_store(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Session store {action} failed: {e}")
            raise SessionStoreError(f"Session store {action} failed") from e

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------
    def sign_in(self, username: str, password: str) -> IssuedToken:
        """
        Verify credentials and open a new session.

        Raises:
            AuthenticationError: Unknown user, wrong password or inactive account
        """
        with self._session_store("sign-in"):
            # Row lock serializes concurrent sign-ins and refreshes per user
            user = self.db.execute(
                select(User).where(User.username == username.lower()).with_for_update()
            ).scalar_one_or_none()

            if user is None:
                dummy_verify()
                logger.warning(f"Sign-in failed: unknown user {username!r}")
                raise AuthenticationError(INVALID_CREDENTIALS)

            if not verify_password(password, user.hashed_password):
                logger.warning(f"Sign-in failed: wrong password for {username!r}")
                raise AuthenticationError(INVALID_CREDENTIALS)

            if not user.is_active:
                logger.warning(f"Sign-in failed: inactive account {username!r}")
                raise AuthenticationError(INVALID_CREDENTIALS)

            now = self.clock()
            # One active session per user
            self.db.execute(
                update(AuthSession)
                .where(
                    AuthSession.user_id == user.id,
                    AuthSession.state == SessionState.ACTIVE.value,
                )
                .values(state=SessionState.REVOKED.value, revoked_at=now)
            )
            issued = self._issue(user, now)
            user.last_login_at = now
            self.db.commit()

        logger.info(f"User signed in: {user.username} (session {issued.session_id[:8]}...)")
        return issued

    def refresh(self, token: str | None) -> IssuedToken:
        """
        Swap a live token for a new one and revoke the old session.

        Raises:
            AuthenticationError: Token unknown, expired or already revoked
        """
        with self._session_store("refresh"):
            session = self._usable_session(token)
            user = self.db.execute(
                select(User).where(User.id == session.user_id).with_for_update()
            ).scalar_one()
            now = self.clock()
            new_id = secrets.token_urlsafe(32)

            # Only one of several concurrent refreshes of the same token may
            # move it out of ACTIVE; the others match no row.
            result = self.db.execute(
                update(AuthSession)
                .where(
                    AuthSession.id == session.id,
                    AuthSession.state == SessionState.ACTIVE.value,
                )
                .values(
                    state=SessionState.REVOKED.value,
                    revoked_at=now,
                    replaced_by=new_id,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.db.rollback()
                logger.warning(f"Session {session.id[:8]}... already rotated or revoked")
                raise AuthenticationError(INVALID_TOKEN)

            issued = self._issue(user, now, session_id=new_id)
            self.db.commit()

        logger.info(
            f"Session {session.id[:8]}... refreshed as {issued.session_id[:8]}... "
            f"for {session.user.username}"
        )
        return issued

    def sign_out(self, token: str | None) -> None:
        """
        Revoke the token's session if there is one.

        Idempotent: missing, malformed, unknown, expired and already revoked
        tokens all succeed without changing anything.
        """
        with self._session_store("sign-out"):
            session = self._resolve(token)
            if session is None:
                return
            if session.session_state is SessionState.ACTIVE:
                session.revoke(self.clock())
                self.db.commit()
                logger.info(f"Session {session.id[:8]}... signed out")

    def authenticate(self, token: str | None) -> AuthSession:
        """
        Gate for protected routes.

        Returns:
            The ACTIVE session the token belongs to

        Raises:
            AuthenticationError: Token missing, forged, unknown, expired or revoked
        """
        with self._session_store("lookup"):
            return self._usable_session(token)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _resolve(self, token: str | None) -> AuthSession | None:
        if not token:
            return None
        # The session row, not the token's exp claim, decides expiry
        payload = decode_session_token(token, verify_exp=False)
        if payload is None:
            return None
        session = self.db.get(AuthSession, payload["sid"])
        if session is None or session.user.username != payload.get("sub"):
            return None
        return session

    def _usable_session(self, token: str | None) -> AuthSession:
        if not token:
            raise AuthenticationError("Session token required")

        session = self._resolve(token)
        if session is None:
            raise AuthenticationError(INVALID_TOKEN)

        now = self.clock()
        if session.is_usable(now):
            return session

        if session.session_state is SessionState.ACTIVE:
            session.expire()
            self.db.commit()
            logger.info(f"Session {session.id[:8]}... expired")
        raise AuthenticationError(INVALID_TOKEN)

    def _issue(self, user: User, now: datetime, session_id: str | None = None) -> IssuedToken:
        expires_at = now + self.lifetime
        session = AuthSession(
            id=session_id or secrets.token_urlsafe(32),
            user=user,
            state=SessionState.ACTIVE.value,
            issued_at=now,
            expires_at=expires_at,
        )
        self.db.add(session)
        token = create_session_token(user.username, session.id, now, expires_at)
        return IssuedToken(token=token, expires_at=expires_at, session_id=session.id)


# =============================================================================
# Account helpers
# =============================================================================
def create_user(db: Session, username: str, password: str) -> User:
    """
    Create an account with a bcrypt-hashed password.

    Used by the seed script; there is no public registration endpoint.
    """
    user = User(
        username=username.lower(),
        hashed_password=hash_password(password),
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created user: {user.username}")
    return user
