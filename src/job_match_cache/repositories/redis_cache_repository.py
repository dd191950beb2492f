"""Redis implementation of CacheStore.

Each cache entry is a single Redis string holding a small JSON document,
so value and expiry are always replaced together by one ``SET``.
"""

import json
import logging
import math
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import redis.asyncio as redis
from redis.exceptions import RedisError

from job_match_cache.config import get_redis_client, settings
from job_match_cache.entities import CacheEntryEntity
from job_match_cache.exceptions import StoreUnavailableError
from job_match_cache.utils import escape_glob

logger = logging.getLogger(__name__)

_DELETE_BATCH = 500


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Translate Redis/socket faults into ``StoreUnavailableError``."""
    try:
        yield
    except (RedisError, OSError) as e:
        raise StoreUnavailableError(f"Redis {operation} failed: {e}") from e


class RedisCacheRepository:
    """Redis key/value store with explicit expiry filtering.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Storage layout:
    - Key: ``<namespace>:<cache key>``
    - Value: ``{"key": ..., "value": ..., "expires_at": <unix ts>}``
    - Native ``PX`` TTL set slightly past ``expires_at`` so Redis reclaims
      dead entries; reads still check ``expires_at`` themselves
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        namespace: str | None = None,
        clock: Callable[[], float] | None = None,
        reclaim_grace_seconds: float = 60.0,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: Async Redis client (``decode_responses=True``). If None, creates default.
            namespace: Prefix for all keys. Defaults to settings.
            clock: Source of the current Unix time. Defaults to ``time.time``.
            reclaim_grace_seconds: Extra native TTL past ``expires_at``.
        """
        self._client = redis_client or get_redis_client()
        self._namespace = namespace or settings.cache_namespace
        self._clock = clock or time.time
        self._grace = reclaim_grace_seconds

    @classmethod
    def create(
        cls,
        redis_client: redis.Redis | None = None,
        namespace: str | None = None,
    ) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository with defaults.

        Args:
            redis_client: Async Redis client. If None, builds one from settings.
            namespace: Key namespace. If None, uses settings.

        Returns:
            Configured RedisCacheRepository
        """
        return cls(redis_client=redis_client, namespace=namespace)

    def _storage_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def _decode(self, raw: str | None, now: float) -> CacheEntryEntity | None:
        if raw is None:
            return None
        try:
            doc = json.loads(raw)
            entry = CacheEntryEntity(
                key=doc["key"],
                value=doc["value"],
                expires_at=float(doc["expires_at"]),
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            logger.warning("Skipping undecodable cache document: %.80s", raw)
            return None
        return entry if entry.is_live(now) else None

    def _encode(self, entry: CacheEntryEntity) -> str:
        return json.dumps(
            {"key": entry.key, "value": entry.value, "expires_at": entry.expires_at},
            ensure_ascii=False,
        )

    def _native_ttl_ms(self, entry: CacheEntryEntity, now: float) -> int:
        return max(1, math.ceil((entry.expires_at - now + self._grace) * 1000))

    async def get(self, key: str) -> CacheEntryEntity | None:
        """Fetch a live entry.

        Args:
            key: The cache key

        Returns:
            The entry if present and unexpired, None otherwise
        """
        with store_errors("GET"):
            raw = await self._client.get(self._storage_key(key))
        return self._decode(raw, self._clock())

    async def get_many(self, keys: list[str]) -> list[CacheEntryEntity]:
        """Fetch live entries for several keys with one MGET.

        Args:
            keys: Cache keys to look up

        Returns:
            Entries that exist and are unexpired, in input order
        """
        if not keys:
            return []

        with store_errors("MGET"):
            raws = await self._client.mget([self._storage_key(k) for k in keys])

        now = self._clock()
        entries = []
        for raw in raws:
            entry = self._decode(raw, now)
            if entry is not None:
                entries.append(entry)
        return entries

    async def upsert(self, entry: CacheEntryEntity) -> None:
        """Insert or replace an entry with a single SET.

        Args:
            entry: The entry to write
        """
        now = self._clock()
        with store_errors("SET"):
            await self._client.set(
                self._storage_key(entry.key),
                self._encode(entry),
                px=self._native_ttl_ms(entry, now),
            )

    async def upsert_many(self, entries: list[CacheEntryEntity]) -> None:
        """Write several entries in one non-transactional pipeline.

        Args:
            entries: Entries to write
        """
        if not entries:
            return

        now = self._clock()
        with store_errors("pipeline SET"):
            async with self._client.pipeline(transaction=False) as pipe:
                for entry in entries:
                    pipe.set(
                        self._storage_key(entry.key),
                        self._encode(entry),
                        px=self._native_ttl_ms(entry, now),
                    )
                await pipe.execute()

    async def delete_by_key(self, key: str) -> bool:
        """Delete a specific entry by key.

        Args:
            key: The cache key to delete

        Returns:
            True if deleted, False otherwise
        """
        with store_errors("DEL"):
            result: int = await self._client.delete(self._storage_key(key))
        return result > 0

    async def delete_by_prefix(self, prefix: str) -> int:
        """Delete every entry whose key starts with ``prefix``.

        Walks the full SCAN cursor so no matching key is skipped, deleting
        in batches as it goes.

        Args:
            prefix: Literal key prefix

        Returns:
            Number of entries deleted
        """
        pattern = escape_glob(self._storage_key(prefix)) + "*"
        deleted = 0
        batch: list[str] = []

        with store_errors("SCAN/DEL"):
            async for storage_key in self._client.scan_iter(match=pattern, count=_DELETE_BATCH):
                batch.append(storage_key)
                if len(batch) >= _DELETE_BATCH:
                    deleted += await self._client.delete(*batch)
                    batch = []
            if batch:
                deleted += await self._client.delete(*batch)

        return deleted

    async def count_all(self) -> int:
        """Count stored entries in this namespace.

        Returns:
            Total number of keys under the namespace
        """
        count = 0
        with store_errors("SCAN"):
            async for _ in self._client.scan_iter(match=f"{escape_glob(self._namespace)}:*"):
                count += 1
        return count

    async def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError):
            return False

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
