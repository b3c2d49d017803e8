"""Achievement models."""

from enum import Enum

from pydantic import BaseModel, Field

from tango.srs.time import utc_now_iso


class AchievementType(str, Enum):
    """Every badge a user can unlock. Each one unlocks at most once per user."""

    FIRST_QUIZ = "first_quiz"

    WORDS_50 = "words_50"
    WORDS_100 = "words_100"
    WORDS_250 = "words_250"
    WORDS_500 = "words_500"
    WORDS_1000 = "words_1000"
    WORDS_2000 = "words_2000"
    WORDS_5000 = "words_5000"

    STREAK_3 = "streak_3"
    STREAK_7 = "streak_7"
    STREAK_14 = "streak_14"
    STREAK_30 = "streak_30"
    STREAK_60 = "streak_60"
    STREAK_100 = "streak_100"
    STREAK_365 = "streak_365"

    REVIEWS_500 = "reviews_500"
    REVIEWS_1000 = "reviews_1000"
    REVIEWS_5000 = "reviews_5000"

    PERFECT_SESSION = "perfect_session"
    ACCURACY_WEEK_80 = "accuracy_week_80"

    DAILY_50 = "daily_50"
    DAILY_100 = "daily_100"


class Achievement(BaseModel):
    """An unlocked achievement, stored once per user and type."""

    userId: str = Field(..., description="Owner user ID (partition key)")
    type: AchievementType
    unlockedAt: str = Field(default_factory=utc_now_iso, description="ISO-8601 UTC with Z suffix")


class AchievementListResponse(BaseModel):
    """Response for GET /stats/achievements."""

    achievements: list[Achievement]
    count: int
