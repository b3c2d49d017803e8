"""Models module for Pydantic schemas."""

from .progress import (
    CardPhase,
    CardState,
    default_card_state,
    is_new_card,
    normalize_card_state,
    upgrade_legacy_state,
)
from .quiz import (
    CardDirection,
    DailyStats,
    QuizSettings,
    QuizSettingsUpdate,
    merge_quiz_settings,
)
from .achievement import Achievement, AchievementListResponse, AchievementType
from .word import (
    Word,
    WordBase,
    WordCreate,
    WordResponse,
    WordListResponse,
    WordWithProgress,
)
from .study import (
    DueCountResponse,
    DueWordsResponse,
    PracticeResultRequest,
    PracticeWordsResponse,
    PreviewResponse,
    ReviewRequest,
    ReviewResponse,
    StatsSummaryResponse,
    StudyItem,
)

__all__ = [
    "Achievement",
    "AchievementListResponse",
    "AchievementType",
    "CardPhase",
    "CardState",
    "default_card_state",
    "is_new_card",
    "normalize_card_state",
    "upgrade_legacy_state",
    "CardDirection",
    "DailyStats",
    "QuizSettings",
    "QuizSettingsUpdate",
    "merge_quiz_settings",
    "Word",
    "WordBase",
    "WordCreate",
    "WordResponse",
    "WordListResponse",
    "WordWithProgress",
    "DueCountResponse",
    "DueWordsResponse",
    "PracticeResultRequest",
    "PracticeWordsResponse",
    "PreviewResponse",
    "ReviewRequest",
    "ReviewResponse",
    "StatsSummaryResponse",
    "StudyItem",
]
