import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

import redis.asyncio as redis
from dotenv import load_dotenv
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff

load_dotenv()


def _parse_rule(raw: str) -> tuple[int, int]:
    """Parse a ``"<limit>/<window_ms>"`` override such as ``"50/60000"``."""
    limit, _, window_ms = raw.partition("/")
    return int(limit), int(window_ms)


@dataclass(frozen=True)
class RateLimitRule:
    """Request budget for one endpoint class."""

    limit: int
    window_ms: int

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError(f"Rate limit must be positive, got {self.limit}")
        if self.window_ms < 1:
            raise ValueError(f"Rate limit window must be positive, got {self.window_ms}ms")


@dataclass(frozen=True)
class RateLimitConfig:
    """Endpoint class -> rule table handed to the rate limiter.

    Example:
        ```python
        config = RateLimitConfig(rules={"AI_SCORING": RateLimitRule(3, 60_000)})
        limiter = RateLimiter(store=store, config=config)
        ```
    """

    rules: dict[str, RateLimitRule] = field(default_factory=dict)

    def rule_for(self, endpoint_class: str) -> RateLimitRule:
        try:
            return self.rules[endpoint_class]
        except KeyError:
            raise ValueError(f"Unknown endpoint class: {endpoint_class!r}") from None

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RateLimitConfig":
        return cls(
            rules={
                "AI_SCORING": RateLimitRule(*_parse_rule(settings.rate_limit_ai_scoring)),
                "AI_CHAT": RateLimitRule(*_parse_rule(settings.rate_limit_ai_chat)),
                "RESUME_PARSE": RateLimitRule(*_parse_rule(settings.rate_limit_resume_parse)),
                "GENERAL": RateLimitRule(*_parse_rule(settings.rate_limit_general)),
            }
        )


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    store_timeout_seconds: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "2.0"))
    store_retries: int = int(os.getenv("STORE_RETRIES", "1"))
    store_max_connections: int = int(os.getenv("STORE_MAX_CONNECTIONS", "50"))

    # Cache
    cache_namespace: str = os.getenv("CACHE_NAMESPACE", "cache")
    match_score_ttl: int = int(os.getenv("MATCH_SCORE_TTL", "1800"))  # 30 minutes
    profile_namespace: str = os.getenv("PROFILE_NAMESPACE", "profile")

    # Rate limits, "<limit>/<window_ms>"
    rate_limit_namespace: str = os.getenv("RATE_LIMIT_NAMESPACE", "ratelimit")
    rate_limit_ai_scoring: str = os.getenv("RATE_LIMIT_AI_SCORING", "50/60000")
    rate_limit_ai_chat: str = os.getenv("RATE_LIMIT_AI_CHAT", "20/60000")
    rate_limit_resume_parse: str = os.getenv("RATE_LIMIT_RESUME_PARSE", "10/3600000")
    rate_limit_general: str = os.getenv("RATE_LIMIT_GENERAL", "100/60000")

    # OpenRouter
    openrouter_api_key: str | None = os.getenv("OPENROUTER_API_KEY")
    openrouter_base_url: str = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
    openrouter_timeout: float = float(os.getenv("OPENROUTER_TIMEOUT", "30"))
    scoring_model: str = os.getenv("SCORING_MODEL", "google/gemini-2.0-flash-001")
    parsing_model: str = os.getenv("PARSING_MODEL", "google/gemini-2.0-flash-001")
    chat_model: str = os.getenv("CHAT_MODEL", "google/gemini-2.0-flash-001")
    app_url: str = os.getenv("APP_URL", "http://localhost:3000")

    # Scoring
    neutral_score: int = int(os.getenv("NEUTRAL_SCORE", "50"))
    max_batch_jobs: int = int(os.getenv("MAX_BATCH_JOBS", "20"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.store_timeout_seconds <= 0:
            raise ValueError("STORE_TIMEOUT_SECONDS must be positive")

        if self.store_retries < 0:
            raise ValueError("STORE_RETRIES must not be negative")

        if self.store_max_connections < 1:
            raise ValueError("STORE_MAX_CONNECTIONS must be positive")

        if self.match_score_ttl <= 0:
            raise ValueError("MATCH_SCORE_TTL must be positive")

        if not 0 <= self.neutral_score <= 100:
            raise ValueError(f"NEUTRAL_SCORE must be between 0 and 100, got {self.neutral_score}")

        for name in ("rate_limit_ai_scoring", "rate_limit_ai_chat", "rate_limit_resume_parse", "rate_limit_general"):
            raw = getattr(self, name)
            try:
                RateLimitRule(*_parse_rule(raw))
            except ValueError as e:
                raise ValueError(f"{name.upper()} must look like '<limit>/<window_ms>', got {raw!r}") from e


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create an async Redis client with bounded socket timeouts.

    Callers past ``store_max_connections`` wait for a free connection
    instead of failing; a wait longer than the store timeout raises
    ``ConnectionError`` like any other outage.
    """
    pool = redis.BlockingConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.store_max_connections,
        timeout=settings.store_timeout_seconds,
        password=settings.redis_password,
        socket_timeout=settings.store_timeout_seconds,
        socket_connect_timeout=settings.store_timeout_seconds,
        retry=Retry(NoBackoff(), settings.store_retries),
        decode_responses=True,
    )
    return redis.Redis.from_pool(pool)


def configure_logging(level: str | None = None) -> None:
    """Apply LOG_LEVEL to the root logger."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
