"""Quiz settings and daily statistics models."""

from typing import Literal

from pydantic import BaseModel, Field


CardDirection = Literal["term_first", "meaning_first", "random"]


class QuizSettings(BaseModel):
    """Per-user study settings. Read-only input to the session selector."""

    newPerDay: int = Field(20, ge=0, le=9999, description="New words introduced per day")
    maxReviewsPerDay: int = Field(100, ge=0, le=9999, description="Total ratings allowed per day")
    jlptFilter: int | None = Field(None, ge=1, le=5, description="Only introduce new words of this JLPT level")
    priorityFilter: int | None = Field(None, ge=1, le=3, description="Only introduce new words of this priority")
    cardDirection: CardDirection = Field("term_first", description="Which side is shown first")
    sessionSize: int = Field(20, ge=1, le=500, description="Words per study session")
    leechThreshold: int = Field(8, ge=1, description="Lapses before a word is flagged as a leech")


class QuizSettingsUpdate(BaseModel):
    """Partial update of quiz settings.

    The filters accept an explicit null to clear them, so callers should send
    only the fields they change (exclude_unset is honoured).
    """

    newPerDay: int | None = Field(None, ge=0, le=9999)
    maxReviewsPerDay: int | None = Field(None, ge=0, le=9999)
    jlptFilter: int | None = Field(None, ge=1, le=5)
    priorityFilter: int | None = Field(None, ge=1, le=3)
    cardDirection: CardDirection | None = None
    sessionSize: int | None = Field(None, ge=1, le=500)
    leechThreshold: int | None = Field(None, ge=1)


class DailyStats(BaseModel):
    """Counters for one user on one local calendar day."""

    userId: str = Field(..., description="Owner user ID (partition key)")
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="Local date key YYYY-MM-DD")
    newCount: int = 0
    reviewCount: int = 0
    againCount: int = 0
    reviewAgainCount: int = 0
    newAgainCount: int = 0
    hardCount: int = 0
    goodCount: int = 0
    easyCount: int = 0
    masteredInSessionCount: int = 0
    practiceCount: int = 0
    practiceKnownCount: int = 0


_NULLABLE_SETTINGS = {"jlptFilter", "priorityFilter"}


def merge_quiz_settings(current: QuizSettings, update: QuizSettingsUpdate) -> QuizSettings:
    """Apply the fields set on `update`; an explicit null only clears the filters."""
    changes = {
        key: value
        for key, value in update.model_dump(exclude_unset=True).items()
        if value is not None or key in _NULLABLE_SETTINGS
    }
    return QuizSettings(**{**current.model_dump(), **changes})
