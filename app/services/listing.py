"""
Recipe Listing Cache (cache-aside)

Serves GET /recipes from Redis and keeps the cached copy honest.

Cache Strategy:
===============
- The whole collection is cached as one JSON array under a single key
  (settings.recipes_cache_key). There is no pagination, so there are no
  partial listings to track.
- Read: HIT returns the cached array without touching the record store.
  MISS loads every recipe from the store, writes the array back to the
  cache, and returns the fresh list.
- Write: after a create, update or delete has been committed, the key is
  deleted. A failed mutation never invalidates.
- Cache failures are raised as CacheError. A cache outage is reported to
  the caller rather than hidden behind slower store reads.

Consistency:
============
Mutation and invalidation are two separate calls with no lock around them.
A reader that repopulates the key between a writer's commit and its delete
may cache a listing that is stale until the next invalidation (or the
configured TTL, if any).
"""

import logging

from pydantic import ValidationError as PydanticValidationError

from app.config import get_settings
from app.exceptions import CacheError
from app.schemas.recipe import RecipeListAdapter, RecipeResponse
from app.services.cache import Cache
from app.services.recipe_store import RecipeStore

logger = logging.getLogger(__name__)


def matches_tag(recipe: RecipeResponse, tag: str) -> bool:
    """Case-insensitive tag match."""
    wanted = tag.casefold()
    return any(t.casefold() == wanted for t in recipe.tags)


class RecipeListing:
    """
    Cache-aside reader for the full recipe listing.

    Args:
        store: Record store used on a cache miss
        cache: Cache holding the serialized listing
        key: Cache key (defaults to settings.recipes_cache_key)
        ttl: Expiry in seconds for repopulated listings, 0/None for none
    """

    def __init__(
        self,
        store: RecipeStore,
        cache: Cache,
        key: str | None = None,
        ttl: int | None = None,
    ) -> None:
        settings = get_settings()
        self.store = store
        self.cache = cache
        self.key = key or settings.recipes_cache_key
        self.ttl = settings.recipes_cache_ttl if ttl is None else ttl

    def get_listing(self) -> list[RecipeResponse]:
        """
        Return every recipe, from the cache when possible.

        Raises:
            CacheError: Redis failed, or the cached entry could not be decoded
            RecordStoreError: The store query failed on a miss
        """
        lookup = self.cache.get(self.key)

        if lookup.is_hit:
            logger.debug("Serving recipe listing from cache")
            return self._decode(lookup.value)

        if not lookup.is_miss:
            raise CacheError("Recipe listing cache is unavailable") from lookup.error

        logger.info("Recipe listing cache miss, querying record store")
        recipes = [RecipeResponse.from_model(r) for r in self.store.find_all()]
        self.cache.set(self.key, self._encode(recipes), ttl=self.ttl)
        return recipes

    def search(self, tag: str) -> list[RecipeResponse]:
        """Filter the listing down to recipes tagged with tag. Never cached."""
        return [recipe for recipe in self.get_listing() if matches_tag(recipe, tag)]

    def invalidate(self) -> None:
        """
        Drop the cached listing.

        Call only after a store mutation has been committed.
        """
        logger.info("Invalidating recipe listing cache")
        self.cache.delete(self.key)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------
    @staticmethod
    def _encode(recipes: list[RecipeResponse]) -> bytes:
        return RecipeListAdapter.dump_json(recipes, by_alias=True)

    def _decode(self, raw: bytes) -> list[RecipeResponse]:
        try:
            return RecipeListAdapter.validate_json(raw)
        except PydanticValidationError as e:
            logger.error(f"Corrupted cache entry under {self.key}: {e}")
            raise CacheError("Cached recipe listing is corrupted") from e
