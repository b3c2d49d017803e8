"""Selects the storage backend for the running app."""

import logging

from tango.config import get_app_settings
from tango.repositories.base import StudyRepository

logger = logging.getLogger(__name__)

# Singleton instance
_study_repository: StudyRepository | None = None


def get_study_repository() -> StudyRepository:
    """Get the study repository singleton for the configured STORAGE_BACKEND."""
    global _study_repository
    if _study_repository is None:
        settings = get_app_settings()
        if settings.uses_cosmos:
            from tango.repositories.cosmos_repository import CosmosStudyRepository

            _study_repository = CosmosStudyRepository(
                settings_ttl_seconds=settings.settings_cache_ttl_seconds,
            )
        else:
            from tango.repositories.memory_repository import MemoryStudyRepository

            _study_repository = MemoryStudyRepository()
        logger.info("Study repository backend: %s", settings.storage_backend)
    return _study_repository


def reset_study_repository() -> None:
    """Drop the singleton (tests and backend switches)."""
    global _study_repository
    _study_repository = None
