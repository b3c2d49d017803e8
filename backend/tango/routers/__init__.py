"""API routers module."""

from .words import router as words_router
from .study import router as study_router
from .settings import router as settings_router
from .settings import stats_router

__all__ = [
    "words_router",
    "study_router",
    "settings_router",
    "stats_router",
]
