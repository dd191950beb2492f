"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .match_handler import MatchHandler
from .resume_handler import ResumeHandler
from .status_handler import StatusHandler

__all__ = [
    "MatchHandler",
    "ResumeHandler",
    "StatusHandler",
]
