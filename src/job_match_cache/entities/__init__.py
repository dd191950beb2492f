"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.

Entities should have:
- No JSON serialization logic beyond plain dict conversion
- No Pydantic validation
- No external dependencies
- Pure domain logic only
"""

from .cache_entry import CacheEntryEntity
from .match_score import (
    JobDescriptorEntity,
    JobMatchEntity,
    MatchScoreEntity,
    ResumeProfileEntity,
    ScoringReportEntity,
)
from .rate_limit import RateLimitRecordEntity, RateLimitResultEntity

__all__ = [
    "CacheEntryEntity",
    "JobDescriptorEntity",
    "JobMatchEntity",
    "MatchScoreEntity",
    "RateLimitRecordEntity",
    "RateLimitResultEntity",
    "ResumeProfileEntity",
    "ScoringReportEntity",
]
