"""Exception types and FastAPI error handlers.

Only ``RateLimitExceededError`` is meant to reach clients as a distinct
outcome. Store and AI faults are absorbed by the services; the handlers
below cover the few places where they cannot be (profile storage, auth).
"""

import logging
import math
import time
from typing import TYPE_CHECKING

from fastapi import Request
from fastapi.responses import JSONResponse

if TYPE_CHECKING:
    from job_match_cache.entities import RateLimitResultEntity

logger = logging.getLogger(__name__)


class ServiceException(Exception):
    """Base exception for service layer errors."""


class StoreUnavailableError(ServiceException):
    """Raised by repositories when Redis cannot be reached or times out."""


class ScorerError(ServiceException):
    """Raised when the AI provider fails or returns an unusable response."""


class ResumeNotFoundError(ServiceException):
    """Raised when a user has no resume on file."""


class AuthenticationRequiredError(ServiceException):
    """Raised when an endpoint needs a user id and none was supplied."""


class RateLimitExceededError(ServiceException):
    """Raised when a caller has used up the budget for an endpoint class.

    ``now`` is the limiter's clock reading at rejection time; ``Retry-After``
    is measured from it.
    """

    def __init__(self, endpoint_class: str, result: "RateLimitResultEntity", now: float | None = None) -> None:
        self.endpoint_class = endpoint_class
        self.result = result
        now = time.time() if now is None else now
        self.retry_after_seconds = max(0, math.ceil(result.reset_at - now))
        super().__init__(
            f"Rate limit exceeded for {endpoint_class}. "
            f"Try again after {result.reset_at_datetime.isoformat()}"
        )


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceededError) -> JSONResponse:
    logger.info("Rate limit hit on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=429,
        headers={"Retry-After": str(exc.retry_after_seconds)},
        content={
            "success": False,
            "error": str(exc),
            "type": exc.__class__.__name__,
            "limit": exc.result.limit,
            "remaining": exc.result.remaining,
            "reset_at": exc.result.reset_at_datetime.isoformat(),
        },
    )


async def service_exception_handler(request: Request, exc: ServiceException) -> JSONResponse:
    """Map service exceptions to HTTP responses with a consistent body."""
    status_code = 500
    if isinstance(exc, ResumeNotFoundError):
        status_code = 404
    elif isinstance(exc, AuthenticationRequiredError):
        status_code = 401
    elif isinstance(exc, StoreUnavailableError):
        status_code = 503
    elif isinstance(exc, ScorerError):
        status_code = 502

    if status_code >= 500:
        logger.error("Service error in %s: %s", request.url.path, exc, exc_info=True)

    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": str(exc),
            "type": exc.__class__.__name__,
        },
    )
