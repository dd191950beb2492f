"""Job Match Cache - cached, rate-limited AI match scoring.

This package provides a layered architecture for scoring resumes against
job postings without paying for the same AI call twice:

Layers:
    - protocols: Interface contracts (CacheStore, RateLimitStore, MatchScorer, ...)
    - repositories: Data access implementations (Redis, OpenRouter)
    - services: Business logic (caching, rate limiting, scoring)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from job_match_cache.repositories import RedisCacheRepository
    from job_match_cache.services import CacheService, MatchScoreCache

    match_cache = MatchScoreCache(CacheService.create(repository=RedisCacheRepository.create()))
    await match_cache.set_one("user-1", "job-9", result)
    ```

For HTTP API:
    ```python
    from job_match_cache.api.app import app
    ```
"""

from job_match_cache.config import RateLimitConfig, RateLimitRule, get_redis_client, settings
from job_match_cache.dto import BatchMatchRequest, MatchRequest
from job_match_cache.entities import (
    CacheEntryEntity,
    MatchScoreEntity,
    RateLimitRecordEntity,
    RateLimitResultEntity,
)
from job_match_cache.exceptions import RateLimitExceededError, StoreUnavailableError
from job_match_cache.handlers import MatchHandler
from job_match_cache.protocols import CacheStore, MatchScorer, RateLimitStore
from job_match_cache.repositories import OpenRouterClient, RedisCacheRepository, RedisRateLimitRepository
from job_match_cache.services import CacheService, MatchScoreCache, RateLimiter, ScoringService

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    "RateLimitConfig",
    "RateLimitRule",
    # Protocols (interfaces)
    "CacheStore",
    "MatchScorer",
    "RateLimitStore",
    # Services (business logic)
    "CacheService",
    "MatchScoreCache",
    "RateLimiter",
    "ScoringService",
    # Handlers (HTTP)
    "MatchHandler",
    # Repositories (data access)
    "OpenRouterClient",
    "RedisCacheRepository",
    "RedisRateLimitRepository",
    # Entities (domain models)
    "CacheEntryEntity",
    "MatchScoreEntity",
    "RateLimitRecordEntity",
    "RateLimitResultEntity",
    # Errors
    "RateLimitExceededError",
    "StoreUnavailableError",
    # DTOs (API contracts)
    "MatchRequest",
    "BatchMatchRequest",
]
