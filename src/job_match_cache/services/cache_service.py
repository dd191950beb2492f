"""Cache service for generic TTL caching.

This service owns the lifecycle of cache entries and applies the
fail-open policy: a store fault turns reads into misses and writes into
no-ops, and is only ever reported through logging.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from job_match_cache.entities import CacheEntryEntity
from job_match_cache.exceptions import StoreUnavailableError
from job_match_cache.protocols import CacheStore

logger = logging.getLogger(__name__)


class CacheService:
    """Core cache orchestration service.

    This service depends on the CacheStore PROTOCOL, not a concrete
    implementation, so the backend can be Redis, MongoDB, etc.

    None of the public methods raise on store faults. The cache is an
    optimization, never the source of truth.

    Example:
        ```python
        from job_match_cache.repositories import RedisCacheRepository
        from job_match_cache.services import CacheService

        cache = CacheService.create(repository=RedisCacheRepository.create())
        await cache.set("jobs:remote", ["job-1", "job-2"], ttl_seconds=300)
        jobs = await cache.get("jobs:remote")
        ```
    """

    def __init__(
        self,
        repository: CacheStore,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the cache service.

        Args:
            repository: Cache storage backend (required).
            clock: Source of the current Unix time. Defaults to ``time.time``.
        """
        self._repository = repository
        self._clock = clock or time.time

    @classmethod
    def create(
        cls,
        repository: CacheStore,
        clock: Callable[[], float] | None = None,
    ) -> "CacheService":
        """Factory method to create CacheService.

        Args:
            repository: Cache storage backend (required).
            clock: Optional clock override, mainly for tests.

        Returns:
            Configured CacheService instance
        """
        return cls(repository=repository, clock=clock)

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None on miss, expiry or store fault.

        Args:
            key: The cache key

        Returns:
            The cached value if a live entry exists, None otherwise
        """
        try:
            entry = await self._repository.get(key)
        except StoreUnavailableError as e:
            logger.warning("Cache get failed for %s, treating as miss: %s", key, e)
            return None

        if entry is None:
            logger.debug("Cache MISS: %s", key)
            return None

        logger.debug("Cache HIT: %s", key)
        return entry.value

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        """Look up several keys in one store round-trip.

        Args:
            keys: Cache keys to look up

        Returns:
            Mapping of key -> value for live entries only
        """
        if not keys:
            return {}

        try:
            entries = await self._repository.get_many(keys)
        except StoreUnavailableError as e:
            logger.warning("Cache get_many failed for %d keys, treating as misses: %s", len(keys), e)
            return {}

        return {entry.key: entry.value for entry in entries}

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value for ``ttl_seconds``, replacing any existing entry.

        Args:
            key: The cache key
            value: JSON-serializable payload
            ttl_seconds: Time-to-live in seconds
        """
        entry = CacheEntryEntity(key=key, value=value, expires_at=self._clock() + ttl_seconds)
        try:
            await self._repository.upsert(entry)
        except (StoreUnavailableError, TypeError, ValueError) as e:
            logger.warning("Cache set failed for %s: %s", key, e)

    async def set_many(self, items: dict[str, Any], ttl_seconds: float) -> None:
        """Store several values with one bulk write.

        Args:
            items: Mapping of key -> value
            ttl_seconds: Time-to-live applied to every entry
        """
        if not items:
            return

        expires_at = self._clock() + ttl_seconds
        entries = [CacheEntryEntity(key=k, value=v, expires_at=expires_at) for k, v in items.items()]
        try:
            await self._repository.upsert_many(entries)
        except (StoreUnavailableError, TypeError, ValueError) as e:
            logger.warning("Cache bulk set failed for %d keys: %s", len(entries), e)

    async def delete(self, key: str) -> None:
        """Delete a single entry. Deleting a missing key is not an error.

        Args:
            key: The cache key to delete
        """
        try:
            await self._repository.delete_by_key(key)
        except StoreUnavailableError as e:
            logger.warning("Cache delete failed for %s: %s", key, e)

    async def delete_by_prefix(self, prefix: str) -> int:
        """Delete every entry whose key starts with ``prefix``.

        Args:
            prefix: Literal key prefix

        Returns:
            Number of entries deleted (0 on store fault)
        """
        try:
            count = await self._repository.delete_by_prefix(prefix)
        except StoreUnavailableError as e:
            logger.warning("Cache delete by prefix %r failed: %s", prefix, e)
            return 0

        logger.info("Invalidated %d cache entries with prefix %r", count, prefix)
        return count

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics (empty on store fault)
        """
        try:
            total = await self._repository.count_all()
        except StoreUnavailableError as e:
            logger.warning("Cache stats unavailable: %s", e)
            return {}
        return {"total_entries": total}

    async def is_healthy(self) -> bool:
        """Check if the cache backend is reachable."""
        return await self._repository.health_check()

    @property
    def repository(self) -> CacheStore:
        """Get the underlying repository (for testing)."""
        return self._repository
