"""Job-search assistant chat, limited per caller under ``AI_CHAT``."""

from job_match_cache.protocols import ChatModel, ProfileStore
from job_match_cache.services.rate_limiter import RateLimiter

CHAT_ENDPOINT = "AI_CHAT"


class ChatService:
    """Rate-limited access to the chat model.

    Anonymous callers are limited by their network origin; signed-in users
    by user id, and also get their resume as context.
    """

    def __init__(self, rate_limiter: RateLimiter, chat_model: ChatModel, profiles: ProfileStore) -> None:
        self._rate_limiter = rate_limiter
        self._chat_model = chat_model
        self._profiles = profiles

    async def reply(
        self,
        identifier: str,
        messages: list[dict[str, str]],
        user_id: str | None = None,
    ) -> str:
        """Return the assistant's reply to ``messages``.

        Raises:
            RateLimitExceededError: If ``identifier`` is over the AI_CHAT budget
            ScorerError: If the chat model call fails
        """
        await self._rate_limiter.enforce(identifier, CHAT_ENDPOINT)

        profile = await self._profiles.get(user_id) if user_id else None
        return await self._chat_model.chat(messages, profile=profile)
