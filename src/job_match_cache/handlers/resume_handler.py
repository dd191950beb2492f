"""HTTP handlers for resume upload, fetch and deletion."""

from datetime import datetime, timezone

from job_match_cache.dto import ResumeProfileItem, ResumeResponse, ResumeUploadRequest
from job_match_cache.entities import ResumeProfileEntity
from job_match_cache.services import ResumeService


def to_profile_item(profile: ResumeProfileEntity) -> ResumeProfileItem:
    uploaded_at = None
    if profile.uploaded_at is not None:
        uploaded_at = datetime.fromtimestamp(profile.uploaded_at, tz=timezone.utc)
    return ResumeProfileItem(
        skills=list(profile.skills),
        experience=list(profile.experience),
        education=list(profile.education),
        summary=profile.summary,
        file_name=profile.file_name,
        uploaded_at=uploaded_at,
    )


class ResumeHandler:
    """HTTP handlers for the resume lifecycle."""

    def __init__(self, resume_service: ResumeService) -> None:
        self._resumes = resume_service

    async def get_resume(self, user_id: str) -> ResumeResponse:
        """Handle GET /resume requests."""
        profile = await self._resumes.get(user_id)
        return ResumeResponse(resume=to_profile_item(profile) if profile else None)

    async def upload_resume(self, user_id: str, request: ResumeUploadRequest) -> ResumeResponse:
        """Handle POST /resume requests."""
        profile = await self._resumes.upload(user_id, request.file_name, request.text)
        return ResumeResponse(message="Resume uploaded successfully", resume=to_profile_item(profile))

    async def delete_resume(self, user_id: str) -> ResumeResponse:
        """Handle DELETE /resume requests."""
        await self._resumes.delete(user_id)
        return ResumeResponse(message="Resume deleted successfully")
