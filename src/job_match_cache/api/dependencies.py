"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends, FastAPI, Request

from job_match_cache.config import RateLimitConfig, configure_logging, get_redis_client, settings
from job_match_cache.exceptions import AuthenticationRequiredError
from job_match_cache.handlers import MatchHandler, ResumeHandler, StatusHandler
from job_match_cache.repositories import (
    OpenRouterClient,
    RedisCacheRepository,
    RedisProfileRepository,
    RedisRateLimitRepository,
)
from job_match_cache.services import (
    CacheService,
    ChatService,
    MatchScoreCache,
    RateLimiter,
    ResumeService,
    ScoringService,
)

logger = logging.getLogger(__name__)

USER_ID_HEADER = "x-user-id"


@dataclass(frozen=True)
class Identity:
    """Who is calling.

    Attributes:
        user_id: Stable user id forwarded by the auth gateway, if signed in
        identifier: Rate limit key - the user id, or the network origin
    """

    user_id: str | None
    identifier: str


def get_identity(request: Request) -> Identity:
    """Resolve the caller.

    The auth gateway verifies the identity-provider token and forwards the
    user id in ``X-User-Id``. Anonymous callers fall back to the first
    ``X-Forwarded-For`` hop, then the peer address.
    """
    user_id = (request.headers.get(USER_ID_HEADER) or "").strip()
    if user_id:
        return Identity(user_id=user_id, identifier=user_id)

    forwarded = (request.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    if forwarded:
        return Identity(user_id=None, identifier=forwarded)
    if request.client and request.client.host:
        return Identity(user_id=None, identifier=request.client.host)
    return Identity(user_id=None, identifier="anonymous")


def require_user(identity: Annotated[Identity, Depends(get_identity)]) -> str:
    """Dependency for endpoints that need a signed-in user.

    Raises:
        AuthenticationRequiredError: If no user id was forwarded
    """
    if identity.user_id is None:
        raise AuthenticationRequiredError("Unauthorized: missing user identity")
    return identity.user_id


def _from_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Check lifespan setup.")
    return value


def get_match_handler(request: Request) -> MatchHandler:
    """Dependency injection for MatchHandler from app.state."""
    return _from_state(request, "match_handler")


def get_resume_handler(request: Request) -> ResumeHandler:
    """Dependency injection for ResumeHandler from app.state."""
    return _from_state(request, "resume_handler")


def get_status_handler(request: Request) -> StatusHandler:
    """Dependency injection for StatusHandler from app.state."""
    return _from_state(request, "status_handler")


def build_lifespan(
    redis_client: redis.Redis | None = None,
    ai_client: OpenRouterClient | None = None,
    rate_limit_config: RateLimitConfig | None = None,
    clock: Callable[[], float] | None = None,
):
    """Build the lifespan context manager, optionally with injected collaborators.

    Anything not injected is created from settings and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize all layers and store them in app.state.

        1. Repositories (Redis stores, AI client)
        2. Services (cache, rate limiting, scoring, resumes, chat)
        3. Handlers (HTTP endpoints)
        """
        configure_logging()

        client = redis_client or get_redis_client()
        ai = ai_client or OpenRouterClient.create()
        config = rate_limit_config or RateLimitConfig.from_settings(settings)

        cache_repository = RedisCacheRepository(redis_client=client, clock=clock)
        profiles = RedisProfileRepository.create(redis_client=client)
        rate_limiter = RateLimiter(
            store=RedisRateLimitRepository.create(redis_client=client),
            config=config,
            clock=clock,
        )

        cache_service = CacheService.create(repository=cache_repository, clock=clock)
        match_cache = MatchScoreCache(cache_service)
        scoring_service = ScoringService(
            rate_limiter=rate_limiter,
            match_cache=match_cache,
            profiles=profiles,
            scorer=ai,
        )
        resume_service = ResumeService(
            rate_limiter=rate_limiter,
            profiles=profiles,
            parser=ai,
            match_cache=match_cache,
            clock=clock,
        )
        chat_service = ChatService(rate_limiter=rate_limiter, chat_model=ai, profiles=profiles)

        app.state.match_handler = MatchHandler(scoring_service=scoring_service)
        app.state.resume_handler = ResumeHandler(resume_service=resume_service)
        app.state.status_handler = StatusHandler(
            cache_service=cache_service,
            match_cache=match_cache,
            rate_limiter=rate_limiter,
            chat_service=chat_service,
            namespace=cache_repository.namespace,
            ai_configured=await ai.is_available(),
        )

        logger.info("Services initialized (redis=%s, match TTL=%ss)", settings.redis_url, match_cache.ttl_seconds)
        if not await cache_service.is_healthy():
            logger.warning("Redis is not reachable; cache and rate limiting will fail open")

        yield

        del app.state.match_handler
        del app.state.resume_handler
        del app.state.status_handler
        if ai_client is None:
            await ai.close()
        if redis_client is None:
            await client.aclose()
        logger.info("Services shut down")

    return lifespan


# Type aliases for cleaner dependency injection
IdentityDep = Annotated[Identity, Depends(get_identity)]
UserDep = Annotated[str, Depends(require_user)]
MatchHandlerDep = Annotated[MatchHandler, Depends(get_match_handler)]
ResumeHandlerDep = Annotated[ResumeHandler, Depends(get_resume_handler)]
StatusHandlerDep = Annotated[StatusHandler, Depends(get_status_handler)]
