"""Models for study (review / queue / preview) endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from tango.models.achievement import AchievementType
from tango.models.progress import CardState
from tango.models.quiz import DailyStats
from tango.models.word import WordResponse
from tango.srs.rating import RatingName


class ReviewRequest(BaseModel):
    """Request for POST /study/review.

    Exactly one of `rating` or `quality` must be given. Quality uses the 0-5 scale
    (0-2 Again, 3 Hard, 4 Good, 5 Easy).
    """

    wordId: str = Field(..., min_length=1)
    rating: RatingName | None = None
    quality: int | None = None

    @model_validator(mode="after")
    def _one_of_rating_or_quality(self) -> "ReviewRequest":
        if (self.rating is None) == (self.quality is None):
            raise ValueError("Provide exactly one of 'rating' or 'quality'")
        return self


class ReviewResponse(BaseModel):
    """Response for POST /study/review."""

    progress: CardState
    wasNew: bool
    becameLeech: bool = Field(False, description="True when this review flagged the word as a leech")
    newAchievements: list[AchievementType] = Field(default_factory=list, description="Unlocked by this review")


class StudyItem(BaseModel):
    """A word in the study queue together with its card state."""

    word: WordResponse
    progress: CardState | None = None


class DueWordsResponse(BaseModel):
    """Response for GET /study/due."""

    items: list[StudyItem]
    count: int


class DueCountResponse(BaseModel):
    count: int


class PracticeWordsResponse(BaseModel):
    words: list[WordResponse]
    count: int


class PracticeResultRequest(BaseModel):
    known: bool


class PreviewResponse(BaseModel):
    """Formatted next interval for each rating."""

    wordId: str
    again: str
    hard: str
    good: str
    easy: str


class StatsSummaryResponse(BaseModel):
    """Today's counters plus derived figures."""

    today: DailyStats
    accuracy: int = Field(..., ge=0, le=100)
    streakDays: int = Field(..., ge=0)
    dueCount: int = Field(..., ge=0)
