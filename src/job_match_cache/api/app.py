from collections.abc import Callable
from typing import Any

import redis.asyncio as redis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from job_match_cache.api.dependencies import (
    IdentityDep,
    MatchHandlerDep,
    ResumeHandlerDep,
    StatusHandlerDep,
    UserDep,
    build_lifespan,
)
from job_match_cache.config import RateLimitConfig, settings
from job_match_cache.dto import (
    BatchMatchRequest,
    BatchMatchResponse,
    CacheStatsResponse,
    ChatRequest,
    ChatResponse,
    HealthCheckResponse,
    MatchRequest,
    MatchResponse,
    RateLimitStatusResponse,
    ResumeResponse,
    ResumeUploadRequest,
)
from job_match_cache.exceptions import (
    RateLimitExceededError,
    ServiceException,
    rate_limit_exceeded_handler,
    service_exception_handler,
)
from job_match_cache.repositories import OpenRouterClient

API_TITLE = "Job Match Cache API"
API_DESCRIPTION = "Cached, rate-limited resume/job match scoring"
API_VERSION = "0.1.0"


def create_app(
    redis_client: redis.Redis | None = None,
    ai_client: OpenRouterClient | None = None,
    rate_limit_config: RateLimitConfig | None = None,
    clock: Callable[[], float] | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        redis_client: Async Redis client. If None, built from settings at startup.
        ai_client: AI provider. If None, an OpenRouterClient from settings.
        rate_limit_config: Endpoint class limits. If None, from settings.
        clock: Clock override shared by cache and rate limiter (tests).

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=build_lifespan(
            redis_client=redis_client,
            ai_client=ai_client,
            rate_limit_config=rate_limit_config,
            clock=clock,
        ),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RateLimitExceededError, rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ServiceException, service_exception_handler)  # type: ignore[arg-type]

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "description": API_DESCRIPTION,
            "endpoints": {
                "match": "/jobs/match",
                "batch": "/jobs/match/batch",
                "resume": "/resume",
                "chat": "/chat",
                "rate_limit": "/rate-limit/{endpoint_class}",
                "stats": "/cache/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: StatusHandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.post("/jobs/match", response_model=MatchResponse)
    async def match_job(request: MatchRequest, user_id: UserDep, handler: MatchHandlerDep) -> MatchResponse:
        """Score one job against the caller's resume."""
        return await handler.match_job(user_id, request)

    @app.post("/jobs/match/batch", response_model=BatchMatchResponse)
    async def match_jobs(request: BatchMatchRequest, user_id: UserDep, handler: MatchHandlerDep) -> BatchMatchResponse:
        """Score up to 20 jobs against the caller's resume."""
        return await handler.match_jobs(user_id, request)

    @app.get("/resume", response_model=ResumeResponse)
    async def get_resume(user_id: UserDep, handler: ResumeHandlerDep) -> ResumeResponse:
        """Return the caller's parsed resume."""
        return await handler.get_resume(user_id)

    @app.post("/resume", response_model=ResumeResponse)
    async def upload_resume(
        request: ResumeUploadRequest,
        user_id: UserDep,
        handler: ResumeHandlerDep,
    ) -> ResumeResponse:
        """Upload and parse resume text; drops the caller's cached scores."""
        return await handler.upload_resume(user_id, request)

    @app.delete("/resume", response_model=ResumeResponse)
    async def delete_resume(user_id: UserDep, handler: ResumeHandlerDep) -> ResumeResponse:
        """Delete the caller's resume; drops the caller's cached scores."""
        return await handler.delete_resume(user_id)

    @app.post("/chat", response_model=ChatResponse)
    async def chat(request: ChatRequest, identity: IdentityDep, handler: StatusHandlerDep) -> ChatResponse:
        """Job-search assistant. Anonymous callers are limited by origin."""
        return await handler.chat(identity.identifier, identity.user_id, request)

    @app.get("/rate-limit/{endpoint_class}", response_model=RateLimitStatusResponse)
    async def rate_limit_status(
        endpoint_class: str,
        identity: IdentityDep,
        handler: StatusHandlerDep,
    ) -> RateLimitStatusResponse:
        """Remaining budget for an endpoint class, without using any."""
        return await handler.rate_limit_status(identity.identifier, endpoint_class)

    @app.get("/cache/stats", response_model=CacheStatsResponse)
    async def cache_stats(handler: StatusHandlerDep) -> CacheStatsResponse:
        """Cache statistics."""
        return await handler.get_stats()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "job_match_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
