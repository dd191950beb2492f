"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a single cached value.

    Callers never build these directly; the cache service creates them
    from a key, a value and a TTL.

    Attributes:
        key: Globally unique cache key (e.g. ``match:<user>:<job>``)
        value: Any JSON-serializable payload, opaque to the cache layer
        expires_at: Unix timestamp after which the entry is logically dead
    """

    key: str
    value: Any
    expires_at: float

    def is_live(self, now: float) -> bool:
        """Return True while ``now`` has not passed ``expires_at``."""
        return self.expires_at > now
