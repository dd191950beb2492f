"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import BatchMatchRequest, ChatMessage, ChatRequest, JobPayload, MatchRequest, ResumeUploadRequest
from .responses import (
    BatchMatchResponse,
    CacheStatsResponse,
    ChatResponse,
    HealthCheckResponse,
    MatchResponse,
    MatchScoreItem,
    RateLimitStatusResponse,
    ResumeProfileItem,
    ResumeResponse,
)

__all__ = [
    "BatchMatchRequest",
    "ChatMessage",
    "ChatRequest",
    "JobPayload",
    "MatchRequest",
    "ResumeUploadRequest",
    "BatchMatchResponse",
    "CacheStatsResponse",
    "ChatResponse",
    "HealthCheckResponse",
    "MatchResponse",
    "MatchScoreItem",
    "RateLimitStatusResponse",
    "ResumeProfileItem",
    "ResumeResponse",
]
