"""Per-identifier, per-endpoint-class rate limiting.

Counting happens in the shared store, never in process memory, so the
limit holds across stateless request handlers. The counter is incremented
before it is compared: a rejected request is still recorded.
"""

import logging
import time
from collections.abc import Callable

from job_match_cache.config import RateLimitConfig, RateLimitRule
from job_match_cache.entities import RateLimitRecordEntity, RateLimitResultEntity
from job_match_cache.exceptions import RateLimitExceededError, StoreUnavailableError
from job_match_cache.protocols import RateLimitStore

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window rate limiter over a RateLimitStore.

    Example:
        ```python
        limiter = RateLimiter(
            store=RedisRateLimitRepository.create(),
            config=RateLimitConfig.from_settings(settings),
        )
        result = await limiter.check_rate_limit(user_id, "AI_SCORING")
        if not result.success:
            ...  # reject with 429, report result.reset_at
        ```
    """

    def __init__(
        self,
        store: RateLimitStore,
        config: RateLimitConfig,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            store: Shared counter backend (required).
            config: Endpoint class -> limit/window table (required).
            clock: Source of the current Unix time. Defaults to ``time.time``.
        """
        self._store = store
        self._config = config
        self._clock = clock or time.time

    @staticmethod
    def _result(rule: RateLimitRule, record: RateLimitRecordEntity) -> RateLimitResultEntity:
        return RateLimitResultEntity(
            success=record.count <= rule.limit,
            limit=rule.limit,
            remaining=max(0, rule.limit - record.count),
            reset_at=record.expires_at,
        )

    @staticmethod
    def _full_budget(rule: RateLimitRule, now: float) -> RateLimitResultEntity:
        return RateLimitResultEntity(
            success=True,
            limit=rule.limit,
            remaining=rule.limit,
            reset_at=now + rule.window_ms / 1000,
        )

    async def check_rate_limit(self, identifier: str, endpoint_class: str) -> RateLimitResultEntity:
        """Count one request and report whether it is within budget.

        Fails open: if the store is unreachable the request is allowed with
        the full budget reported.

        Args:
            identifier: User id or network-origin string
            endpoint_class: Configured endpoint class (e.g. ``"AI_SCORING"``)

        Returns:
            RateLimitResultEntity for this request

        Raises:
            ValueError: If ``endpoint_class`` is not configured
        """
        rule = self._config.rule_for(endpoint_class)
        now = self._clock()

        try:
            record = await self._store.increment(identifier, endpoint_class, now, rule.window_ms)
        except StoreUnavailableError as e:
            logger.warning("Rate limit check for %s/%s failed open: %s", identifier, endpoint_class, e)
            return self._full_budget(rule, now)

        result = self._result(rule, record)
        if not result.success:
            logger.info(
                "Rate limit exceeded: identifier=%s endpoint=%s count=%d limit=%d",
                identifier,
                endpoint_class,
                record.count,
                rule.limit,
            )
        return result

    async def get_rate_limit_status(self, identifier: str, endpoint_class: str) -> RateLimitResultEntity:
        """Report the current budget without counting a request.

        Args:
            identifier: User id or network-origin string
            endpoint_class: Configured endpoint class

        Returns:
            RateLimitResultEntity; full budget when no window is open

        Raises:
            ValueError: If ``endpoint_class`` is not configured
        """
        rule = self._config.rule_for(endpoint_class)
        now = self._clock()

        try:
            record = await self._store.find_live(identifier, endpoint_class, now, rule.window_ms)
        except StoreUnavailableError as e:
            logger.warning("Rate limit status for %s/%s failed open: %s", identifier, endpoint_class, e)
            return self._full_budget(rule, now)

        if record is None:
            return self._full_budget(rule, now)

        remaining = max(0, rule.limit - record.count)
        return RateLimitResultEntity(
            success=remaining > 0,
            limit=rule.limit,
            remaining=remaining,
            reset_at=record.expires_at,
        )

    async def enforce(self, identifier: str, endpoint_class: str) -> RateLimitResultEntity:
        """Like ``check_rate_limit`` but raise when the budget is exhausted.

        Raises:
            RateLimitExceededError: If the request is over the limit
        """
        result = await self.check_rate_limit(identifier, endpoint_class)
        if not result.success:
            raise RateLimitExceededError(endpoint_class, result, now=self._clock())
        return result

    @property
    def config(self) -> RateLimitConfig:
        return self._config
