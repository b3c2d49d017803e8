"""Application services."""

from .study_service import ReviewResult, StudyService, StudySummary, get_study_service

__all__ = [
    "ReviewResult",
    "StudyService",
    "StudySummary",
    "get_study_service",
]
