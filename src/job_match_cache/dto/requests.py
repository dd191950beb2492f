"""Request DTOs for API endpoints."""

import re
from typing import Literal

from pydantic import BaseModel, Field

_WHITESPACE = re.compile(r"\s+")


class JobPayload(BaseModel):
    """A job posting as sent by the client for scoring."""

    id: str | None = Field(None, description="Stable job id; derived from the title if omitted", min_length=1)
    title: str = Field(..., description="Job title", min_length=1)
    description: str = Field("", description="Job description")
    skills: list[str] = Field(default_factory=list, description="Skills the job requires")

    @property
    def job_id(self) -> str:
        return self.id or _WHITESPACE.sub("-", self.title.strip()).lower()


class MatchRequest(BaseModel):
    """Request DTO for scoring a single job."""

    job: JobPayload


class BatchMatchRequest(BaseModel):
    """Request DTO for scoring several jobs. Only the first 20 are scored."""

    jobs: list[JobPayload] = Field(..., description="Jobs to score", min_length=1)


class ResumeUploadRequest(BaseModel):
    """Request DTO for uploading resume text."""

    file_name: str = Field(..., description="Original file name", min_length=1)
    text: str = Field(..., description="Extracted resume text")


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1)


class ChatRequest(BaseModel):
    """Request DTO for the assistant chat."""

    messages: list[ChatMessage] = Field(..., description="Conversation so far", min_length=1)
