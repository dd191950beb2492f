"""AI provider protocols.

The scoring, parsing and chat calls go to a third-party model API. They
are cost-bearing, slow and may fail; callers rate-limit them and treat
every failure as recoverable.
"""

from typing import Protocol, runtime_checkable

from job_match_cache.entities import JobDescriptorEntity, MatchScoreEntity, ResumeProfileEntity


@runtime_checkable
class MatchScorer(Protocol):
    """Computes resume/job compatibility."""

    async def calculate_match(
        self,
        profile: ResumeProfileEntity,
        job: JobDescriptorEntity,
    ) -> MatchScoreEntity:
        """Score a resume against a job.

        Raises:
            ScorerError: If the provider fails or returns an unusable response
        """
        ...


@runtime_checkable
class ResumeParser(Protocol):
    """Extracts a structured profile from resume text."""

    async def parse_resume(self, text: str) -> ResumeProfileEntity:
        """Parse raw resume text.

        Raises:
            ScorerError: If the provider call fails
        """
        ...


@runtime_checkable
class ChatModel(Protocol):
    """Conversational assistant."""

    async def chat(
        self,
        messages: list[dict[str, str]],
        profile: ResumeProfileEntity | None = None,
    ) -> str:
        """Generate the assistant's next reply.

        Raises:
            ScorerError: If the provider call fails
        """
        ...
