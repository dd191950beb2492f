"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis -> MongoDB, OpenRouter -> another API)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from job_match_cache.protocols import CacheStore, RateLimitStore

    # Type hints work with any implementation
    cache_repo: CacheStore = RedisCacheRepository.create()
    limit_repo: RateLimitStore = RedisRateLimitRepository.create()
    ```
"""

from .ai_provider import ChatModel, MatchScorer, ResumeParser
from .cache_store import CacheStore
from .profile_store import ProfileStore
from .rate_limit_store import RateLimitStore

__all__ = [
    "CacheStore",
    "ChatModel",
    "MatchScorer",
    "ProfileStore",
    "RateLimitStore",
    "ResumeParser",
]
