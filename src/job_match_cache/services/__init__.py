"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from job_match_cache.services import CacheService, MatchScoreCache, RateLimiter

    cache = CacheService.create(repository=RedisCacheRepository.create())
    match_cache = MatchScoreCache(cache)
    limiter = RateLimiter(store=RedisRateLimitRepository.create(), config=config)
    ```
"""

from .cache_service import CacheService
from .chat_service import ChatService
from .match_score_cache import MatchScoreCache, match_score_key, user_match_prefix
from .rate_limiter import RateLimiter
from .resume_service import ResumeService
from .scoring_service import ScoringService

__all__ = [
    "CacheService",
    "ChatService",
    "MatchScoreCache",
    "RateLimiter",
    "ResumeService",
    "ScoringService",
    "match_score_key",
    "user_match_prefix",
]
