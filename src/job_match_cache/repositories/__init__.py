"""Repository layer for data access.

This layer abstracts external dependencies (Redis, the AI provider API)
behind protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis -> MongoDB, OpenRouter -> another API)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from job_match_cache.protocols import CacheStore, ProfileStore, RateLimitStore

from .openrouter_client import OpenRouterClient
from .redis_cache_repository import RedisCacheRepository
from .redis_profile_repository import RedisProfileRepository
from .redis_rate_limit_repository import RedisRateLimitRepository

__all__ = [
    "CacheStore",
    "ProfileStore",
    "RateLimitStore",
    "OpenRouterClient",
    "RedisCacheRepository",
    "RedisProfileRepository",
    "RedisRateLimitRepository",
]
