"""Response DTOs for API endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class MatchScoreItem(BaseModel):
    """Score for a single job."""

    job_id: str = Field(..., description="The scored job")
    score: int = Field(..., description="Compatibility percentage", ge=0, le=100)
    matched_skills: list[str] = Field(default_factory=list, description="Skills found in both resume and job")
    missing_skills: list[str] = Field(default_factory=list, description="Job skills absent from the resume")
    recommendation: str | None = Field(None, description="Guidance for the candidate")
    cached: bool = Field(False, description="Whether the score came from the cache")
    fallback: bool = Field(False, description="Whether scoring failed and a neutral score was substituted")


class MatchResponse(MatchScoreItem):
    """Response DTO for single-job scoring."""

    has_resume: bool = Field(..., description="Whether the user has a parsed resume on file")


class BatchMatchResponse(BaseModel):
    """Response DTO for batch scoring."""

    scores: list[MatchScoreItem] = Field(default_factory=list, description="Scores in request order")
    has_resume: bool = Field(..., description="Whether the user has a parsed resume on file")
    cached_count: int = Field(0, ge=0)
    computed_count: int = Field(0, ge=0)
    message: str | None = None


class ResumeProfileItem(BaseModel):
    skills: list[str] = Field(default_factory=list)
    experience: list[str] = Field(default_factory=list)
    education: list[str] = Field(default_factory=list)
    summary: str = ""
    file_name: str | None = None
    uploaded_at: datetime | None = None


class ResumeResponse(BaseModel):
    """Response DTO for fetching or uploading a resume."""

    message: str | None = None
    resume: ResumeProfileItem | None = None


class ChatResponse(BaseModel):
    reply: str = Field(..., description="The assistant's reply")


class RateLimitStatusResponse(BaseModel):
    """Response DTO for rate limit status."""

    endpoint_class: str
    success: bool = Field(..., description="Whether another request would currently be allowed")
    limit: int = Field(..., ge=1)
    remaining: int = Field(..., ge=0)
    reset_at: datetime = Field(..., description="When the current window closes")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    total_entries: int = Field(..., description="Total number of cached entries", ge=0)
    namespace: str = Field(..., description="Redis key namespace")
    match_score_ttl_seconds: int = Field(..., description="Lifetime of cached match scores", ge=0)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    store_healthy: bool = Field(..., description="Whether Redis is reachable")
    ai_configured: bool = Field(..., description="Whether an AI provider key is configured")
