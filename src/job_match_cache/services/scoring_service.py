"""Scoring orchestration.

Business logic for a scoring request:
1. Count the request against the ``AI_SCORING`` budget (reject when over)
2. Load the user's resume profile; without one, every job gets the
   neutral default and neither the cache nor the AI is consulted
3. Serve what the cache already has
4. Score only the misses, each independently; a failed job gets the
   neutral fallback instead of failing the request
5. Write the fresh scores back and return everything in input order
"""

import asyncio
import logging

from job_match_cache.config import settings
from job_match_cache.entities import (
    JobDescriptorEntity,
    JobMatchEntity,
    MatchScoreEntity,
    ResumeProfileEntity,
    ScoringReportEntity,
)
from job_match_cache.protocols import MatchScorer, ProfileStore
from job_match_cache.services.match_score_cache import MatchScoreCache
from job_match_cache.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

SCORING_ENDPOINT = "AI_SCORING"
NO_RESUME_RECOMMENDATION = "Upload your resume to get personalized match scores."
FALLBACK_RECOMMENDATION = "Match calculation temporarily unavailable."


class ScoringService:
    """Rate-limited, cached resume/job scoring.

    Example:
        ```python
        service = ScoringService(
            rate_limiter=limiter,
            match_cache=match_cache,
            profiles=RedisProfileRepository.create(),
            scorer=OpenRouterClient.create(),
        )
        report = await service.score_jobs(user_id, jobs)
        ```
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        match_cache: MatchScoreCache,
        profiles: ProfileStore,
        scorer: MatchScorer,
        neutral_score: int | None = None,
        max_batch_jobs: int | None = None,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._cache = match_cache
        self._profiles = profiles
        self._scorer = scorer
        self._neutral_score = settings.neutral_score if neutral_score is None else neutral_score
        self._max_batch_jobs = max_batch_jobs or settings.max_batch_jobs

    def _no_resume(self, job: JobDescriptorEntity) -> JobMatchEntity:
        return JobMatchEntity(
            job_id=job.job_id,
            result=MatchScoreEntity(
                score=self._neutral_score,
                missing_skills=list(job.skills),
                recommendation=NO_RESUME_RECOMMENDATION,
            ),
        )

    def _fallback(self, job: JobDescriptorEntity) -> JobMatchEntity:
        return JobMatchEntity(
            job_id=job.job_id,
            result=MatchScoreEntity(
                score=self._neutral_score,
                missing_skills=list(job.skills),
                recommendation=FALLBACK_RECOMMENDATION,
            ),
            fallback=True,
        )

    async def _compute(self, profile: ResumeProfileEntity, job: JobDescriptorEntity) -> JobMatchEntity:
        """Score one job, substituting the neutral fallback on any failure."""
        try:
            result = await self._scorer.calculate_match(profile, job)
        except Exception as e:
            logger.warning("Scoring failed for job=%s, using fallback: %s", job.job_id, e)
            return self._fallback(job)
        return JobMatchEntity(job_id=job.job_id, result=result)

    async def score_job(self, user_id: str, job: JobDescriptorEntity) -> ScoringReportEntity:
        """Score a single job for ``user_id``.

        Raises:
            RateLimitExceededError: If the user is over the AI_SCORING budget
        """
        await self._rate_limiter.enforce(user_id, SCORING_ENDPOINT)

        profile = await self._profiles.get(user_id)
        if profile is None or not profile.has_resume:
            return ScoringReportEntity(matches=[self._no_resume(job)], has_resume=False)

        cached = await self._cache.get_one(user_id, job.job_id)
        if cached is not None:
            return ScoringReportEntity(
                matches=[JobMatchEntity(job_id=job.job_id, result=cached, cached=True)],
                has_resume=True,
            )

        match = await self._compute(profile, job)
        if not match.fallback:
            await self._cache.set_one(user_id, job.job_id, match.result)
        return ScoringReportEntity(matches=[match], has_resume=True)

    async def score_jobs(self, user_id: str, jobs: list[JobDescriptorEntity]) -> ScoringReportEntity:
        """Score up to ``max_batch_jobs`` jobs for ``user_id``.

        Jobs beyond the batch limit are ignored; repeated job ids are scored once.

        Raises:
            RateLimitExceededError: If the user is over the AI_SCORING budget
        """
        await self._rate_limiter.enforce(user_id, SCORING_ENDPOINT)

        batch: dict[str, JobDescriptorEntity] = {}
        for job in jobs[: self._max_batch_jobs]:
            batch.setdefault(job.job_id, job)

        profile = await self._profiles.get(user_id)
        if profile is None or not profile.has_resume:
            return ScoringReportEntity(
                matches=[self._no_resume(job) for job in batch.values()],
                has_resume=False,
            )

        hits = await self._cache.get_many(user_id, list(batch))
        misses = [job for job_id, job in batch.items() if job_id not in hits]

        computed = await asyncio.gather(*(self._compute(profile, job) for job in misses))
        fresh = {match.job_id: match for match in computed}

        await self._cache.set_many(
            user_id,
            {match.job_id: match.result for match in computed if not match.fallback},
        )

        logger.debug(
            "Scored batch for user=%s: %d cached, %d computed",
            user_id,
            len(hits),
            len(fresh),
        )

        matches = []
        for job_id in batch:
            if job_id in hits:
                matches.append(JobMatchEntity(job_id=job_id, result=hits[job_id], cached=True))
            else:
                matches.append(fresh[job_id])
        return ScoringReportEntity(matches=matches, has_resume=True)
