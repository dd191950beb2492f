"""Redis implementation of ProfileStore."""

import json
import logging

import redis.asyncio as redis

from job_match_cache.config import get_redis_client, settings
from job_match_cache.entities import ResumeProfileEntity
from job_match_cache.repositories.redis_cache_repository import store_errors
from job_match_cache.utils import escape_component

logger = logging.getLogger(__name__)


class RedisProfileRepository:
    """Stores each user's parsed resume as JSON at ``profile:<user_id>``.

    Unlike the cache, this is source-of-truth data: store faults propagate
    as ``StoreUnavailableError``.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        namespace: str | None = None,
    ) -> None:
        self._client = redis_client or get_redis_client()
        self._namespace = namespace or settings.profile_namespace

    @classmethod
    def create(
        cls,
        redis_client: redis.Redis | None = None,
        namespace: str | None = None,
    ) -> "RedisProfileRepository":
        """Factory method to create RedisProfileRepository with defaults."""
        return cls(redis_client=redis_client, namespace=namespace)

    def _profile_key(self, user_id: str) -> str:
        return f"{self._namespace}:{escape_component(user_id)}"

    async def get(self, user_id: str) -> ResumeProfileEntity | None:
        with store_errors("GET"):
            raw = await self._client.get(self._profile_key(user_id))
        if raw is None:
            return None
        try:
            return ResumeProfileEntity.from_dict(json.loads(raw))
        except (json.JSONDecodeError, AttributeError, TypeError) as e:
            logger.warning("Corrupt profile for user=%s: %s", user_id, e)
            return None

    async def save(self, user_id: str, profile: ResumeProfileEntity) -> None:
        with store_errors("SET"):
            await self._client.set(self._profile_key(user_id), json.dumps(profile.to_dict(), ensure_ascii=False))

    async def delete(self, user_id: str) -> bool:
        with store_errors("DEL"):
            result: int = await self._client.delete(self._profile_key(user_id))
        return result > 0
