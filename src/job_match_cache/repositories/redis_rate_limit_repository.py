"""Redis implementation of RateLimitStore.

One hash per ``(identifier, endpoint_class)`` holds ``count``,
``window_start`` and ``expires_at`` (Unix milliseconds). The
find-and-increment-or-reset step runs as a Lua script, which Redis
executes atomically, so concurrent requests never lose an increment.
"""

import redis.asyncio as redis
from redis.exceptions import RedisError

from job_match_cache.config import get_redis_client, settings
from job_match_cache.entities import RateLimitRecordEntity
from job_match_cache.repositories.redis_cache_repository import store_errors
from job_match_cache.utils import escape_component

# KEYS[1] record key
# ARGV[1] now_ms, ARGV[2] window threshold (now_ms - window_ms),
# ARGV[3] expires_at_ms, ARGV[4] window_ms
INCREMENT_SCRIPT = """
local start = tonumber(redis.call('HGET', KEYS[1], 'window_start'))
if start and start > tonumber(ARGV[2]) then
  local count = redis.call('HINCRBY', KEYS[1], 'count', 1)
  return {count, redis.call('HGET', KEYS[1], 'window_start'), redis.call('HGET', KEYS[1], 'expires_at')}
end
redis.call('HSET', KEYS[1], 'count', '1', 'window_start', ARGV[1], 'expires_at', ARGV[3])
redis.call('PEXPIRE', KEYS[1], ARGV[4])
return {1, ARGV[1], ARGV[3]}
"""


class RedisRateLimitRepository:
    """Shared rate-limit counters in Redis.

    This class satisfies the RateLimitStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize the rate limit repository.

        Args:
            redis_client: Async Redis client (``decode_responses=True``). If None, creates default.
            namespace: Prefix for all keys. Defaults to settings.
        """
        self._client = redis_client or get_redis_client()
        self._namespace = namespace or settings.rate_limit_namespace
        self._increment = self._client.register_script(INCREMENT_SCRIPT)

    @classmethod
    def create(
        cls,
        redis_client: redis.Redis | None = None,
        namespace: str | None = None,
    ) -> "RedisRateLimitRepository":
        """Factory method to create RedisRateLimitRepository with defaults."""
        return cls(redis_client=redis_client, namespace=namespace)

    def _record_key(self, identifier: str, endpoint_class: str) -> str:
        return f"{self._namespace}:{escape_component(identifier)}:{endpoint_class}"

    async def increment(
        self,
        identifier: str,
        endpoint_class: str,
        now: float,
        window_ms: int,
    ) -> RateLimitRecordEntity:
        """Atomically count one request against the current window.

        Args:
            identifier: Caller identity
            endpoint_class: Operation class being limited
            now: Current Unix timestamp
            window_ms: Window length in milliseconds

        Returns:
            The record after the increment
        """
        now_ms = int(now * 1000)
        with store_errors("EVALSHA"):
            count, window_start, expires_at = await self._increment(
                keys=[self._record_key(identifier, endpoint_class)],
                args=[now_ms, now_ms - window_ms, now_ms + window_ms, window_ms],
            )

        return RateLimitRecordEntity(
            identifier=identifier,
            endpoint_class=endpoint_class,
            count=int(count),
            window_start=int(window_start) / 1000,
            expires_at=int(expires_at) / 1000,
        )

    async def find_live(
        self,
        identifier: str,
        endpoint_class: str,
        now: float,
        window_ms: int,
    ) -> RateLimitRecordEntity | None:
        """Read the current window's record without incrementing it.

        Returns:
            The record, or None if no window is open
        """
        with store_errors("HGETALL"):
            fields = await self._client.hgetall(self._record_key(identifier, endpoint_class))

        if not fields:
            return None

        window_start_ms = int(fields["window_start"])
        if window_start_ms <= int(now * 1000) - window_ms:
            return None

        return RateLimitRecordEntity(
            identifier=identifier,
            endpoint_class=endpoint_class,
            count=int(fields["count"]),
            window_start=window_start_ms / 1000,
            expires_at=int(fields["expires_at"]) / 1000,
        )

    async def health_check(self) -> bool:
        """Check if Redis is accessible."""
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError):
            return False
