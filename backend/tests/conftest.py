"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timezone

import pytest

# Tests run against the in-memory backend by default
os.environ.setdefault("STORAGE_BACKEND", "memory")

from tango.config import get_app_settings
from tango.models import WordCreate
from tango.repositories import MemoryStudyRepository, reset_study_repository
from tango.services import StudyService


NOW = datetime(2025, 3, 1, 9, 0, 0, tzinfo=timezone.utc)
TODAY = "2025-03-01"
USER_ID = "user-001"


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def repo():
    return MemoryStudyRepository()


@pytest.fixture
def service(repo):
    return StudyService(repo)


@pytest.fixture
def make_word(repo):
    """Create a word in the in-memory repository."""

    def _make(term="食べる", meaning="to eat", jlptLevel=5, priority=2, user_id=USER_ID):
        return repo.create_word(
            user_id,
            WordCreate(term=term, meaning=meaning, jlptLevel=jlptLevel, priority=priority),
        )

    return _make


@pytest.fixture
def memory_backend_env(monkeypatch):
    """Fresh in-memory repository singleton for API tests."""
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    get_app_settings.cache_clear()
    reset_study_repository()
    yield
    reset_study_repository()
    get_app_settings.cache_clear()
