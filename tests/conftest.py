"""
pytest Fixtures for Recipes API Tests

This file contains shared fixtures used across all test files.

Collaborators used in tests:
- Record store: SQLite in-memory database, one transaction per test that is
  rolled back afterwards
- Cache: FakeRedis, a dict-backed stand-in for the redis.Redis methods the
  Cache wrapper calls, with call counters and a switch to simulate outages
- Clock: FrozenClock, injected into SessionManager for expiry tests

Both collaborators reach the app through app.dependency_overrides, the same
seam production code uses for injection.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from collections import Counter
from collections.abc import Generator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.dependencies import get_redis
from app.main import app
from app.models import User
from app.services.cache import Cache
from app.services.listing import RecipeListing
from app.services.recipe_store import RecipeStore
from app.services.security import hash_password

TEST_USERNAME = "admin"
TEST_PASSWORD = "SecurePass123"


# =============================================================================
# TEST DOUBLES
# =============================================================================
class FakeRedis:
    """
    In-memory double for the redis.Redis calls made by app.services.cache.

    calls counts every method invocation; set available = False to make
    each call raise a Redis ConnectionError.
    """

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.expiry: dict[str, int] = {}
        self.calls: Counter = Counter()
        self.available = True

    def _check(self, method: str) -> None:
        self.calls[method] += 1
        if not self.available:
            raise RedisConnectionError("Connection refused")

    def get(self, key: str) -> bytes | None:
        self._check("get")
        return self.data.get(key)

    def set(self, key: str, value: bytes, ex: int | None = None) -> bool:
        self._check("set")
        self.data[key] = value
        if ex:
            self.expiry[key] = ex
        return True

    def delete(self, *keys: str) -> int:
        self._check("delete")
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def ping(self) -> bool:
        self._check("ping")
        return True


class FrozenClock:
    """Controllable clock for SessionManager."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime.now(UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


# =============================================================================
# DATABASE FIXTURES
# =============================================================================
@pytest.fixture(scope="session")
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the single connection alive for the entire session.
    Without it, the in-memory database would disappear between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite issues its own BEGIN/COMMIT, which breaks SAVEPOINT-based
    # rollback isolation; hand transaction control to SQLAlchemy instead.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    The session joins an outer transaction that is rolled back afterwards,
    so commits inside the code under test never leak between tests. Commits
    and rollbacks made by the code under test act on a SAVEPOINT.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        join_transaction_mode="create_savepoint",
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


# =============================================================================
# CACHE FIXTURES
# =============================================================================
@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis: FakeRedis) -> Cache:
    return Cache(fake_redis)


@pytest.fixture
def store(db_session: Session) -> RecipeStore:
    return RecipeStore(db_session)


@pytest.fixture
def listing(store: RecipeStore, cache: Cache) -> RecipeListing:
    return RecipeListing(store, cache, key="recipes", ttl=0)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


# =============================================================================
# CLIENT FIXTURES
# =============================================================================
@pytest.fixture(scope="function")
def client(db_session: Session, fake_redis: FakeRedis) -> Generator[TestClient, None, None]:
    """
    Create a test client wired to the test database and FakeRedis.
    """

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================
@pytest.fixture
def sample_user(db_session: Session) -> User:
    """Create an account that can sign in."""
    user = User(
        username=TEST_USERNAME,
        hashed_password=hash_password(TEST_PASSWORD),
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_token(client: TestClient, sample_user: User) -> str:
    """
    Sign in and return the session token.

    The sign-in response also stores the session cookie on the client;
    tests checking anonymous access clear client.cookies first.
    """
    response = client.post(
        "/signin",
        json={"username": TEST_USERNAME, "password": TEST_PASSWORD},
    )
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def tea_recipe() -> dict:
    return {
        "name": "Tea",
        "tags": ["drink"],
        "ingredients": ["water", "tea leaves"],
        "instructions": ["boil", "steep"],
    }
