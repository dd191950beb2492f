"""HTTP handlers for chat, rate limit status, cache stats and health."""

from fastapi import HTTPException, status

from job_match_cache.dto import (
    CacheStatsResponse,
    ChatRequest,
    ChatResponse,
    HealthCheckResponse,
    RateLimitStatusResponse,
)
from job_match_cache.services import CacheService, ChatService, MatchScoreCache, RateLimiter


class StatusHandler:
    """Handlers for the smaller endpoints."""

    def __init__(
        self,
        cache_service: CacheService,
        match_cache: MatchScoreCache,
        rate_limiter: RateLimiter,
        chat_service: ChatService,
        namespace: str,
        ai_configured: bool,
    ) -> None:
        self._cache = cache_service
        self._match_cache = match_cache
        self._rate_limiter = rate_limiter
        self._chat = chat_service
        self._namespace = namespace
        self._ai_configured = ai_configured

    async def chat(self, identifier: str, user_id: str | None, request: ChatRequest) -> ChatResponse:
        """Handle POST /chat requests."""
        messages = [message.model_dump() for message in request.messages]
        reply = await self._chat.reply(identifier, messages, user_id=user_id)
        return ChatResponse(reply=reply)

    async def rate_limit_status(self, identifier: str, endpoint_class: str) -> RateLimitStatusResponse:
        """Handle GET /rate-limit/{endpoint_class} requests.

        Raises:
            HTTPException: 404 if the endpoint class is not configured
        """
        if endpoint_class not in self._rate_limiter.config.rules:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown endpoint class: {endpoint_class}",
            )

        result = await self._rate_limiter.get_rate_limit_status(identifier, endpoint_class)
        return RateLimitStatusResponse(
            endpoint_class=endpoint_class,
            success=result.success,
            limit=result.limit,
            remaining=result.remaining,
            reset_at=result.reset_at_datetime,
        )

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests.

        Raises:
            HTTPException: 503 if the store is unreachable
        """
        stats = await self._cache.get_stats()
        if not stats:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Cache statistics unavailable",
            )

        return CacheStatsResponse(
            total_entries=stats["total_entries"],
            namespace=self._namespace,
            match_score_ttl_seconds=self._match_cache.ttl_seconds,
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        Raises:
            HTTPException: 503 if Redis is unreachable
        """
        store_healthy = await self._cache.is_healthy()
        if not store_healthy:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Redis connection failed",
            )

        return HealthCheckResponse(
            status="healthy",
            store_healthy=store_healthy,
            ai_configured=self._ai_configured,
        )
