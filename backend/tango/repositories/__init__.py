"""Repositories module for data access layer."""

from .base import (
    ConcurrencyConflictError,
    StudyRepository,
    WordNotFoundError,
)
from .memory_repository import MemoryStudyRepository
from .provider import get_study_repository, reset_study_repository

__all__ = [
    "ConcurrencyConflictError",
    "StudyRepository",
    "WordNotFoundError",
    "MemoryStudyRepository",
    "get_study_repository",
    "reset_study_repository",
]
