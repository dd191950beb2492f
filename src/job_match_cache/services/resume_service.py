"""Resume lifecycle.

Every successful upload, replacement or deletion invalidates the user's
cached match scores before returning, since those scores were computed
against the previous resume.
"""

import logging
import time
from collections.abc import Callable

from job_match_cache.entities import ResumeProfileEntity
from job_match_cache.exceptions import ResumeNotFoundError, ScorerError
from job_match_cache.protocols import ProfileStore, ResumeParser
from job_match_cache.services.match_score_cache import MatchScoreCache
from job_match_cache.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

RESUME_PARSE_ENDPOINT = "RESUME_PARSE"


class ResumeService:
    """Upload, fetch and delete resumes."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        profiles: ProfileStore,
        parser: ResumeParser,
        match_cache: MatchScoreCache,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._profiles = profiles
        self._parser = parser
        self._cache = match_cache
        self._clock = clock or time.time

    async def get(self, user_id: str) -> ResumeProfileEntity | None:
        return await self._profiles.get(user_id)

    async def upload(self, user_id: str, file_name: str, text: str) -> ResumeProfileEntity:
        """Parse and store a resume, replacing any previous one.

        A parsing failure still stores the upload, with an empty profile.

        Raises:
            RateLimitExceededError: If the user is over the RESUME_PARSE budget
            StoreUnavailableError: If the profile could not be saved
        """
        await self._rate_limiter.enforce(user_id, RESUME_PARSE_ENDPOINT)

        parsed = ResumeProfileEntity()
        if text.strip():
            try:
                parsed = await self._parser.parse_resume(text)
            except ScorerError as e:
                logger.warning("Resume parsing failed for user=%s: %s", user_id, e)

        profile = ResumeProfileEntity(
            skills=parsed.skills,
            experience=parsed.experience,
            education=parsed.education,
            summary=parsed.summary,
            file_name=file_name,
            uploaded_at=self._clock(),
        )
        await self._profiles.save(user_id, profile)
        await self._cache.invalidate_user(user_id)
        return profile

    async def delete(self, user_id: str) -> None:
        """Remove the user's resume.

        Raises:
            ResumeNotFoundError: If the user has no resume
        """
        if not await self._profiles.delete(user_id):
            raise ResumeNotFoundError(f"No resume found for user {user_id}")
        await self._cache.invalidate_user(user_id)
