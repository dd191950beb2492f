"""HTTP handlers for match scoring.

Handlers convert between DTOs (API contracts) and service calls. Rate
limit rejections propagate as ``RateLimitExceededError`` and are turned
into 429 responses by the app's exception handlers.
"""

from job_match_cache.dto import (
    BatchMatchRequest,
    BatchMatchResponse,
    JobPayload,
    MatchRequest,
    MatchResponse,
    MatchScoreItem,
)
from job_match_cache.entities import JobDescriptorEntity, JobMatchEntity
from job_match_cache.services import ScoringService
from job_match_cache.services.scoring_service import NO_RESUME_RECOMMENDATION


def to_job_entity(job: JobPayload) -> JobDescriptorEntity:
    return JobDescriptorEntity(
        job_id=job.job_id,
        title=job.title,
        description=job.description,
        skills=list(job.skills),
    )


def to_score_item(match: JobMatchEntity) -> MatchScoreItem:
    return MatchScoreItem(
        job_id=match.job_id,
        score=match.result.score,
        matched_skills=list(match.result.matched_skills),
        missing_skills=list(match.result.missing_skills),
        recommendation=match.result.recommendation,
        cached=match.cached,
        fallback=match.fallback,
    )


class MatchHandler:
    """HTTP handlers for single and batch scoring.

    Example:
        ```python
        handler = MatchHandler(scoring_service=scoring_service)

        @app.post("/jobs/match", response_model=MatchResponse)
        async def match(request: MatchRequest, user_id: UserDep):
            return await handler.match_job(user_id, request)
        ```
    """

    def __init__(self, scoring_service: ScoringService) -> None:
        """Initialize the match handler.

        Args:
            scoring_service: The scoring service for business logic (required).
        """
        self._scoring = scoring_service

    async def match_job(self, user_id: str, request: MatchRequest) -> MatchResponse:
        """Handle POST /jobs/match requests."""
        report = await self._scoring.score_job(user_id, to_job_entity(request.job))
        item = to_score_item(report.matches[0])
        return MatchResponse(**item.model_dump(), has_resume=report.has_resume)

    async def match_jobs(self, user_id: str, request: BatchMatchRequest) -> BatchMatchResponse:
        """Handle POST /jobs/match/batch requests."""
        report = await self._scoring.score_jobs(user_id, [to_job_entity(job) for job in request.jobs])
        return BatchMatchResponse(
            scores=[to_score_item(match) for match in report.matches],
            has_resume=report.has_resume,
            cached_count=report.cached_count if report.has_resume else 0,
            computed_count=report.computed_count if report.has_resume else 0,
            message=None if report.has_resume else NO_RESUME_RECOMMENDATION,
        )
