"""
Redis Caching Service

Thin wrapper around a Redis client used by the recipe listing cache.

Features:
- One Redis connection pool per process
- get/set/delete of opaque byte values under string keys
- get() returns a CacheLookup whose state is HIT, MISS or ERROR, so a
  connection failure can never be mistaken for an absent key
- set() and delete() raise CacheError instead of hiding failures

Unlike a best-effort cache, callers are told about every Redis failure.
What to do about it (fail the request, alert) is their decision.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import redis
from redis.exceptions import RedisError

from app.config import get_settings
from app.exceptions import CacheError

logger = logging.getLogger(__name__)

# =============================================================================
# Redis Connection
# =============================================================================

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """
    Get or create the process-wide Redis client.

    redis.from_url() connects lazily, so creating the client never fails on
    an unreachable server; the first command does.

    Returns:
        Redis client instance
    """
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        _redis_client = redis.from_url(
            settings.redis_url,
            decode_responses=False,  # Values are opaque bytes
            socket_connect_timeout=settings.redis_socket_timeout,
            socket_timeout=settings.redis_socket_timeout,
        )
        logger.info("Redis client created")

    return _redis_client


def close_redis_connection() -> None:
    """Close the Redis connection on shutdown."""
    global _redis_client
    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None
        logger.info("Redis connection closed")


# =============================================================================
# Lookup Result
# =============================================================================

class LookupState(str, Enum):
    HIT = "hit"
    MISS = "miss"
    ERROR = "error"


@dataclass(frozen=True)
class CacheLookup:
    """
    Outcome of a cache read.

    value is set only for HIT, error only for ERROR.
    """

    state: LookupState
    value: bytes | None = None
    error: Exception | None = None

    @classmethod
    def hit(cls, value: bytes) -> "CacheLookup":
        return cls(LookupState.HIT, value=value)

    @classmethod
    def miss(cls) -> "CacheLookup":
        return cls(LookupState.MISS)

    @classmethod
    def failed(cls, error: Exception) -> "CacheLookup":
        return cls(LookupState.ERROR, error=error)

    @property
    def is_hit(self) -> bool:
        return self.state is LookupState.HIT

    @property
    def is_miss(self) -> bool:
        return self.state is LookupState.MISS


# =============================================================================
# Core Cache Operations
# =============================================================================

class Cache:
    """
    Key-value cache over a Redis client.

    Args:
        client: A redis.Redis (or compatible) client. Injected so tests can
            pass a double and so the process shares one connection pool.
    """

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    def get(self, key: str) -> CacheLookup:
        try:
            value = self.client.get(key)
        except RedisError as e:
            logger.error(f"Cache get error for {key}: {e}")
            return CacheLookup.failed(e)

        if value is None:
            logger.debug(f"Cache MISS: {key}")
            return CacheLookup.miss()

        logger.debug(f"Cache HIT: {key}")
        if isinstance(value, str):
            value = value.encode("utf-8")
        return CacheLookup.hit(value)

    def set(self, key: str, value: bytes, ttl: int | None = None) -> None:
        """
        Store value under key.

        Args:
            key: Cache key
            value: Bytes to store
            ttl: Expiry in seconds; None or 0 stores without expiry

        Raises:
            CacheError: If Redis rejects the write
        """
        try:
            if ttl:
                self.client.set(key, value, ex=ttl)
            else:
                self.client.set(key, value)
        except RedisError as e:
            logger.error(f"Cache set error for {key}: {e}")
            raise CacheError(f"Could not write cache key {key}") from e
        logger.debug(f"Cache SET: {key} (TTL: {ttl or 'none'})")

    def delete(self, key: str) -> None:
        """
        Remove key. Deleting an absent key is not an error.

        Raises:
            CacheError: If Redis rejects the delete
        """
        try:
            self.client.delete(key)
        except RedisError as e:
            logger.error(f"Cache delete error for {key}: {e}")
            raise CacheError(f"Could not delete cache key {key}") from e
        logger.debug(f"Cache DELETE: {key}")

    def ping(self) -> bool:
        """Report whether Redis answers; used by the health check."""
        try:
            return bool(self.client.ping())
        except RedisError as e:
            logger.warning(f"Cache ping failed: {e}")
            return False
