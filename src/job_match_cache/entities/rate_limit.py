"""Rate limit domain entities."""

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class RateLimitRecordEntity:
    """Counter for one ``(identifier, endpoint_class)`` pair in one window.

    Attributes:
        identifier: User id, or a network-origin string for anonymous callers
        endpoint_class: Name of the rate-limited operation class
        count: Requests observed in the current window (may exceed the limit)
        window_start: Unix timestamp when the window opened
        expires_at: Unix timestamp when the window closes
    """

    identifier: str
    endpoint_class: str
    count: int
    window_start: float
    expires_at: float


@dataclass(frozen=True)
class RateLimitResultEntity:
    """Outcome of a rate limit check."""

    success: bool
    limit: int
    remaining: int
    reset_at: float

    @property
    def reset_at_datetime(self) -> datetime:
        """Convert reset timestamp to an aware UTC datetime."""
        return datetime.fromtimestamp(self.reset_at, tz=timezone.utc)
