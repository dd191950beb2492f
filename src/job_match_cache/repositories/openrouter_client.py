"""OpenRouter-based AI provider.

Uses OpenRouter's OpenAI-compatible chat completions API for three jobs:
scoring a resume against a job, parsing resume text into a profile, and
the job-search assistant chat.

Requirements:
    - ``OPENROUTER_API_KEY`` set in the environment

The client is async and shares one ``httpx.AsyncClient`` so batch scoring
can run many requests concurrently.
"""

import json
import logging
import re

import httpx

from job_match_cache.config import settings
from job_match_cache.entities import JobDescriptorEntity, MatchScoreEntity, ResumeProfileEntity
from job_match_cache.exceptions import ScorerError

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\n?")

SCORING_SYSTEM_PROMPT = (
    "You are a job matching expert. Analyze resume data against job requirements "
    "and calculate match scores. Always respond with valid JSON only, no additional text."
)

PARSING_SYSTEM_PROMPT = (
    "You are a professional resume parser. Extract structured information from resumes "
    "accurately. Always respond with valid JSON only, no additional text."
)

CHAT_SYSTEM_PROMPT = """You are a helpful job search assistant. You help users with:
- Resume improvements and tips
- Job search strategies
- Interview preparation
- Career advice
- Understanding job requirements

{resume_context}
Be helpful, concise, and professional. Focus on actionable advice."""


def _strip_fences(content: str) -> str:
    return _CODE_FENCE.sub("", content).strip()


def _string_list(values: object) -> list[str]:
    if not isinstance(values, list):
        return []
    return [str(v) for v in values if v is not None]


class OpenRouterClient:
    """OpenRouter implementation of the MatchScorer, ResumeParser and ChatModel protocols.

    This class satisfies all three protocols through structural typing -
    no explicit inheritance needed.

    Example:
        ```python
        client = OpenRouterClient.create()
        result = await client.calculate_match(profile, job)
        print(result.score)  # 0-100
        await client.close()
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        scoring_model: str | None = None,
        parsing_model: str | None = None,
        chat_model: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the OpenRouter client.

        Args:
            api_key: OpenRouter API key. Defaults to settings.openrouter_api_key.
            base_url: API base URL. Defaults to settings.openrouter_base_url.
            timeout: Request timeout in seconds.
            scoring_model: Model used for match scoring.
            parsing_model: Model used for resume parsing.
            chat_model: Model used for the assistant chat.
            http_client: Preconfigured httpx client. If None, created on first use.
        """
        self._api_key = api_key or settings.openrouter_api_key
        self._base_url = (base_url or settings.openrouter_base_url).rstrip("/")
        self._timeout = timeout or settings.openrouter_timeout
        self._scoring_model = scoring_model or settings.scoring_model
        self._parsing_model = parsing_model or settings.parsing_model
        self._chat_model = chat_model or settings.chat_model
        self._client = http_client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @classmethod
    def create(cls, api_key: str | None = None, base_url: str | None = None) -> "OpenRouterClient":
        """Factory method to create OpenRouterClient with defaults from settings."""
        return cls(api_key=api_key, base_url=base_url)

    async def _complete(self, messages: list[dict[str, str]], model: str) -> str:
        """Send a chat completion request and return the message content.

        Raises:
            ScorerError: On missing credentials, HTTP errors or malformed responses
        """
        if not self._api_key:
            raise ScorerError("OPENROUTER_API_KEY is not configured")

        try:
            response = await self.client.post(
                f"{self._base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "HTTP-Referer": settings.app_url,
                    "X-Title": "Job Match Cache",
                },
                json={
                    "model": model,
                    "messages": messages,
                    "temperature": 0.7,
                    "max_tokens": 4096,
                },
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise ScorerError(f"OpenRouter API error: {e}") from e
        except ValueError as e:
            raise ScorerError(f"OpenRouter returned invalid JSON: {e}") from e

        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise ScorerError(f"Unexpected response format: {data}") from e

    async def calculate_match(
        self,
        profile: ResumeProfileEntity,
        job: JobDescriptorEntity,
    ) -> MatchScoreEntity:
        """Score a resume against a job posting.

        Raises:
            ScorerError: If the call fails or the reply is not a usable score
        """
        prompt = f"""Analyze how well this candidate matches the job posting.

Resume Data:
Skills: {", ".join(profile.skills)}
Experience: {" | ".join(profile.experience)}
Education: {" | ".join(profile.education)}
Summary: {profile.summary}

Job Posting:
Title: {job.title}
Description: {job.description}
Required Skills: {", ".join(job.skills)}

Respond with this exact JSON format:
{{"score": 75, "matchedSkills": ["skill1"], "missingSkills": ["skill2"], "recommendation": "Brief recommendation"}}

Score must be an integer 0-100. Return ONLY valid JSON."""

        content = await self._complete(
            [
                {"role": "system", "content": SCORING_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            model=self._scoring_model,
        )

        try:
            data = json.loads(_strip_fences(content))
            score = round(float(data["score"]))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, OverflowError) as e:
            raise ScorerError(f"Unparseable match response: {content[:200]!r}") from e

        recommendation = data.get("recommendation")
        return MatchScoreEntity(
            score=min(100, max(0, score)),
            matched_skills=_string_list(data.get("matchedSkills")),
            missing_skills=_string_list(data.get("missingSkills")),
            recommendation=str(recommendation) if recommendation else None,
        )

    async def parse_resume(self, text: str) -> ResumeProfileEntity:
        """Extract skills, experience, education and a summary from resume text.

        Unparseable model output yields an empty profile rather than an error.

        Raises:
            ScorerError: If the API call itself fails
        """
        prompt = f"""Parse the following resume and extract the information in this exact JSON format:
{{"skills": ["skill1"], "experience": ["Job Title at Company (Duration) - Brief description"],
"education": ["Degree at Institution (Year)"], "summary": "A brief 2-3 sentence professional summary"}}

Resume:
{text}

Return ONLY valid JSON, no markdown or additional text."""

        content = await self._complete(
            [
                {"role": "system", "content": PARSING_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            model=self._parsing_model,
        )

        try:
            data = json.loads(_strip_fences(content))
        except json.JSONDecodeError:
            logger.warning("Failed to parse resume response: %.200s", content)
            return ResumeProfileEntity()

        if not isinstance(data, dict):
            return ResumeProfileEntity()

        return ResumeProfileEntity(
            skills=_string_list(data.get("skills")),
            experience=_string_list(data.get("experience")),
            education=_string_list(data.get("education")),
            summary=str(data.get("summary") or ""),
        )

    async def chat(
        self,
        messages: list[dict[str, str]],
        profile: ResumeProfileEntity | None = None,
    ) -> str:
        """Generate the assistant's reply, with resume context when available."""
        resume_context = ""
        if profile is not None and profile.has_resume:
            resume_context = (
                f"User's Resume Skills: {', '.join(profile.skills)}\n"
                f"User's Experience: {' | '.join(profile.experience)}\n"
                f"User's Summary: {profile.summary}\n"
            )

        system = CHAT_SYSTEM_PROMPT.format(resume_context=resume_context)
        return await self._complete(
            [{"role": "system", "content": system}, *messages],
            model=self._chat_model,
        )

    async def is_available(self) -> bool:
        """OpenRouter is usable only when a key is configured."""
        return bool(self._api_key)

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
