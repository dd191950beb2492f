"""Match score domain entities."""

from dataclasses import dataclass, field
from typing import Any


def _unique_strings(values: Any, field_name: str) -> list[str]:
    if not isinstance(values, (list, tuple, set, frozenset)):
        raise ValueError(f"{field_name} must be a list of strings")
    result: list[str] = []
    for value in values:
        if not isinstance(value, str):
            raise ValueError(f"{field_name} must be a list of strings")
        if value not in result:
            result.append(value)
    return result


@dataclass(frozen=True)
class MatchScoreEntity:
    """AI-computed compatibility between a resume and a job posting.

    Attributes:
        score: Compatibility percentage, 0-100
        matched_skills: Skills present in both resume and job
        missing_skills: Skills the job requires that the resume lacks
        recommendation: Optional guidance for the candidate
    """

    score: int
    matched_skills: list[str] = field(default_factory=list)
    missing_skills: list[str] = field(default_factory=list)
    recommendation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "matched_skills": list(self.matched_skills),
            "missing_skills": list(self.missing_skills),
            "recommendation": self.recommendation,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "MatchScoreEntity":
        """Build an entity from a stored dict, validating its shape.

        Raises:
            ValueError: If ``data`` is not a well-formed match score
        """
        if not isinstance(data, dict):
            raise ValueError("Match score must be a mapping")

        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, int) or not 0 <= score <= 100:
            raise ValueError(f"Match score must be an integer 0-100, got {score!r}")

        recommendation = data.get("recommendation")
        if recommendation is not None and not isinstance(recommendation, str):
            raise ValueError("recommendation must be a string")

        return cls(
            score=score,
            matched_skills=_unique_strings(data.get("matched_skills", []), "matched_skills"),
            missing_skills=_unique_strings(data.get("missing_skills", []), "missing_skills"),
            recommendation=recommendation,
        )


@dataclass(frozen=True)
class ResumeProfileEntity:
    """Parsed resume data used as scoring input."""

    skills: list[str] = field(default_factory=list)
    experience: list[str] = field(default_factory=list)
    education: list[str] = field(default_factory=list)
    summary: str = ""
    file_name: str | None = None
    uploaded_at: float | None = None

    @property
    def has_resume(self) -> bool:
        """A profile without skills cannot be scored."""
        return len(self.skills) > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "skills": list(self.skills),
            "experience": list(self.experience),
            "education": list(self.education),
            "summary": self.summary,
            "file_name": self.file_name,
            "uploaded_at": self.uploaded_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResumeProfileEntity":
        return cls(
            skills=[str(s) for s in data.get("skills") or []],
            experience=[str(e) for e in data.get("experience") or []],
            education=[str(e) for e in data.get("education") or []],
            summary=str(data.get("summary") or ""),
            file_name=data.get("file_name"),
            uploaded_at=data.get("uploaded_at"),
        )


@dataclass(frozen=True)
class JobDescriptorEntity:
    """The parts of a job posting the scorer looks at."""

    job_id: str
    title: str
    description: str = ""
    skills: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class JobMatchEntity:
    """A scored job, as returned by the scoring service."""

    job_id: str
    result: MatchScoreEntity
    cached: bool = False
    fallback: bool = False


@dataclass(frozen=True)
class ScoringReportEntity:
    """Scores for one request, in the order the jobs were given."""

    matches: list[JobMatchEntity]
    has_resume: bool

    @property
    def cached_count(self) -> int:
        return sum(1 for m in self.matches if m.cached)

    @property
    def computed_count(self) -> int:
        return sum(1 for m in self.matches if not m.cached)
