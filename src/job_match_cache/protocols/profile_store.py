"""User profile storage protocol."""

from typing import Protocol, runtime_checkable

from job_match_cache.entities import ResumeProfileEntity


@runtime_checkable
class ProfileStore(Protocol):
    """Protocol for the store holding each user's parsed resume."""

    async def get(self, user_id: str) -> ResumeProfileEntity | None:
        """Load a user's resume profile, or None if they have none."""
        ...

    async def save(self, user_id: str, profile: ResumeProfileEntity) -> None:
        """Create or replace a user's resume profile."""
        ...

    async def delete(self, user_id: str) -> bool:
        """Remove a user's resume profile.

        Returns:
            True if a profile was removed
        """
        ...
