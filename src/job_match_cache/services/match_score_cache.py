"""Match score caching on top of CacheService.

Keys follow ``match:<user_id>:<job_id>`` with both ids percent-escaped, so
every score for a user shares the prefix ``match:<user_id>:`` and can be
dropped in one sweep when that user's resume changes.
"""

import logging

from job_match_cache.config import settings
from job_match_cache.entities import MatchScoreEntity
from job_match_cache.services.cache_service import CacheService
from job_match_cache.utils import escape_component, unescape_component

logger = logging.getLogger(__name__)

MATCH_KEY_PREFIX = "match"


def user_match_prefix(user_id: str) -> str:
    """Prefix shared by every match score key of ``user_id``."""
    return f"{MATCH_KEY_PREFIX}:{escape_component(user_id)}:"


def match_score_key(user_id: str, job_id: str) -> str:
    """Deterministic cache key for a ``(user_id, job_id)`` pair."""
    return f"{user_match_prefix(user_id)}{escape_component(job_id)}"


def job_id_from_key(key: str) -> str:
    """Recover the job id from a match score key."""
    return unescape_component(key.rsplit(":", 1)[-1])


class MatchScoreCache:
    """Cache for AI-computed resume/job compatibility results.

    Values are stored as plain dicts and validated back into
    ``MatchScoreEntity`` on read; anything malformed counts as a miss.
    """

    def __init__(self, cache: CacheService, ttl_seconds: int | None = None) -> None:
        """Initialize the match score cache.

        Args:
            cache: Generic cache service (required).
            ttl_seconds: Lifetime of cached scores. Defaults to settings.match_score_ttl.
        """
        self._cache = cache
        self._ttl = settings.match_score_ttl if ttl_seconds is None else ttl_seconds

    @staticmethod
    def _parse(key: str, value: object) -> MatchScoreEntity | None:
        try:
            return MatchScoreEntity.from_dict(value)
        except ValueError as e:
            logger.warning("Ignoring malformed cached match score at %s: %s", key, e)
            return None

    async def get_one(self, user_id: str, job_id: str) -> MatchScoreEntity | None:
        """Return the cached score for one job, or None."""
        key = match_score_key(user_id, job_id)
        value = await self._cache.get(key)
        if value is None:
            return None
        return self._parse(key, value)

    async def set_one(
        self,
        user_id: str,
        job_id: str,
        result: MatchScoreEntity,
        ttl_seconds: int | None = None,
    ) -> None:
        """Cache the score for one job."""
        await self._cache.set(
            match_score_key(user_id, job_id),
            result.to_dict(),
            self._ttl if ttl_seconds is None else ttl_seconds,
        )

    async def get_many(self, user_id: str, job_ids: list[str]) -> dict[str, MatchScoreEntity]:
        """Look up several jobs in one store query.

        Args:
            user_id: Owner of the scores
            job_ids: Jobs to look up

        Returns:
            Mapping of job_id -> score for cache hits only
        """
        if not job_ids:
            return {}

        values = await self._cache.get_many([match_score_key(user_id, job_id) for job_id in job_ids])

        hits: dict[str, MatchScoreEntity] = {}
        for key, value in values.items():
            result = self._parse(key, value)
            if result is not None:
                hits[job_id_from_key(key)] = result
        return hits

    async def set_many(
        self,
        user_id: str,
        results: dict[str, MatchScoreEntity],
        ttl_seconds: int | None = None,
    ) -> None:
        """Cache several scores with one bulk write.

        Args:
            user_id: Owner of the scores
            results: Mapping of job_id -> score
            ttl_seconds: Lifetime override
        """
        if not results:
            return

        await self._cache.set_many(
            {match_score_key(user_id, job_id): result.to_dict() for job_id, result in results.items()},
            self._ttl if ttl_seconds is None else ttl_seconds,
        )

    async def invalidate_user(self, user_id: str) -> int:
        """Drop every cached score for ``user_id``.

        Must run after any resume upload, replacement or deletion completes.

        Returns:
            Number of entries removed
        """
        count = await self._cache.delete_by_prefix(user_match_prefix(user_id))
        logger.info("Invalidated %d match scores for user=%s", count, user_id)
        return count

    @property
    def ttl_seconds(self) -> int:
        return self._ttl
