"""Rate limit storage protocol."""

from typing import Protocol, runtime_checkable

from job_match_cache.entities import RateLimitRecordEntity


@runtime_checkable
class RateLimitStore(Protocol):
    """Protocol for shared sliding-window counters.

    State must live in the backend, not in process memory, since request
    handlers are stateless and may run in separate workers.
    """

    async def increment(
        self,
        identifier: str,
        endpoint_class: str,
        now: float,
        window_ms: int,
    ) -> RateLimitRecordEntity:
        """Atomically count one request.

        If a record exists whose window started after ``now - window``,
        its count is incremented. Otherwise a fresh record with
        ``count = 1`` and ``window_start = now`` replaces it. Both branches
        must run as one atomic operation in the backend.

        Args:
            identifier: Caller identity
            endpoint_class: Operation class being limited
            now: Current Unix timestamp
            window_ms: Window length in milliseconds

        Returns:
            The record after the update
        """
        ...

    async def find_live(
        self,
        identifier: str,
        endpoint_class: str,
        now: float,
        window_ms: int,
    ) -> RateLimitRecordEntity | None:
        """Read the current window's record without counting a request."""
        ...

    async def health_check(self) -> bool:
        """Check if the backend is reachable."""
        ...
