"""Cache storage protocol.

Defines the interface for any key/value backend that can hold expiring
cache entries.

Implementations can include:
- Redis (default)
- MongoDB with a TTL index
- PostgreSQL with an ``expires_at`` column
- Any store offering atomic upsert and prefix deletion
"""

from typing import Protocol, runtime_checkable

from job_match_cache.entities import CacheEntryEntity


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Implementations raise ``StoreUnavailableError`` when the backend cannot
    be reached; swallowing those faults is the cache service's job.

    Example:
        ```python
        from job_match_cache.protocols import CacheStore

        repo: CacheStore = RedisCacheRepository.create()
        ```
    """

    async def get(self, key: str) -> CacheEntryEntity | None:
        """Fetch a live entry.

        Args:
            key: The cache key

        Returns:
            The entry if present and unexpired, None otherwise
        """
        ...

    async def get_many(self, keys: list[str]) -> list[CacheEntryEntity]:
        """Fetch live entries for several keys in one round-trip.

        Args:
            keys: Cache keys to look up

        Returns:
            Only the entries that exist and are unexpired
        """
        ...

    async def upsert(self, entry: CacheEntryEntity) -> None:
        """Atomically insert or replace an entry (value and expiry together).

        Args:
            entry: The entry to write
        """
        ...

    async def upsert_many(self, entries: list[CacheEntryEntity]) -> None:
        """Write several entries with the backend's bulk primitive.

        Partial success is acceptable.

        Args:
            entries: Entries to write
        """
        ...

    async def delete_by_key(self, key: str) -> bool:
        """Delete a specific entry by key.

        Args:
            key: The cache key to delete

        Returns:
            True if deleted, False if it did not exist
        """
        ...

    async def delete_by_prefix(self, prefix: str) -> int:
        """Delete every entry whose key starts with ``prefix``.

        Args:
            prefix: Literal key prefix (no wildcards)

        Returns:
            Number of entries deleted
        """
        ...

    async def count_all(self) -> int:
        """Count stored entries (including not-yet-reclaimed dead ones)."""
        ...

    async def health_check(self) -> bool:
        """Check if the backend is reachable."""
        ...
