"""Card state (per user + word spaced-repetition record)."""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel, Field

from tango.srs.fsrs import difficulty_from_ease
from tango.srs.time import EPOCH, parse_iso_z, utc_datetime_to_iso_z, utc_now_iso


LEGACY_EASE_FACTOR = 2.5


class CardPhase(IntEnum):
    """Lifecycle state of a card. Only the scheduler moves a card between phases."""

    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


class CardState(BaseModel):
    """Full card state as stored by either persistence backend."""

    wordId: str = Field(..., description="Word this card schedules")
    userId: str = Field(..., description="Owner user ID (partition key)")

    nextReview: str = Field(default_factory=utc_now_iso, description="Next due timestamp (UTC ISO Z)")
    intervalDays: int = Field(0, ge=0, description="Last scheduled interval in whole days")
    easeFactor: float = Field(LEGACY_EASE_FACTOR, description="Legacy SM-2 ease factor, kept for old rows")
    reviewCount: int = Field(0, ge=0, description="Total ratings applied")
    lastReviewedAt: str | None = Field(None, description="Last review timestamp (UTC ISO Z)")

    stability: float = Field(0.0, ge=0, description="Days until recall probability decays to the target")
    difficulty: float = Field(0.0, description="Item difficulty, 1 (easy) .. 10 (hard)")
    elapsedDays: int = Field(0, ge=0, description="Days since the previous review, at review time")
    scheduledDays: int = Field(0, ge=0, description="Days that had been scheduled for that gap")
    learningSteps: int = Field(0, ge=0, description="Progress through sub-day learning steps")
    lapses: int = Field(0, ge=0, description="Again ratings on graduated cards")
    cardState: CardPhase = Field(CardPhase.NEW, description="0 New, 1 Learning, 2 Review, 3 Relearning")

    updatedAt: str = Field(default_factory=utc_now_iso, description="Last write timestamp")

    class Config:
        """Pydantic config."""

        json_schema_extra = {
            "example": {
                "wordId": "123e4567-e89b-12d3-a456-426614174001",
                "userId": "user-001",
                "nextReview": "2025-01-05T09:00:00Z",
                "intervalDays": 4,
                "easeFactor": 2.5,
                "reviewCount": 3,
                "lastReviewedAt": "2025-01-01T09:00:00Z",
                "stability": 4.2,
                "difficulty": 5.3,
                "elapsedDays": 1,
                "scheduledDays": 1,
                "learningSteps": 0,
                "lapses": 0,
                "cardState": 2,
                "updatedAt": "2025-01-01T09:00:00Z",
            }
        }

    @property
    def due_at(self) -> datetime:
        return parse_iso_z(self.nextReview)

    @property
    def last_reviewed(self) -> datetime | None:
        if self.lastReviewedAt is None:
            return None
        return parse_iso_z(self.lastReviewedAt)

    def is_due(self, now: datetime) -> bool:
        return self.due_at <= now


def default_card_state(word_id: str, user_id: str, now: datetime | None = None) -> CardState:
    """The implicit state of a word that has never been rated.

    No row is written until the first rating; every lookup miss goes through here.
    """
    now_iso = utc_datetime_to_iso_z(now) if now is not None else utc_now_iso()
    return CardState(wordId=word_id, userId=user_id, nextReview=now_iso, updatedAt=now_iso)


def is_new_card(card: CardState | None) -> bool:
    """True for words with no card yet, or a card that was never rated."""
    if card is None:
        return True
    return card.cardState == CardPhase.NEW and card.reviewCount == 0


def normalize_card_state(raw: dict, now: datetime) -> CardState:
    """Build a CardState from a persisted document, repairing malformed values.

    Negative numbers become 0, an unparsable or pre-epoch nextReview becomes `now`,
    and an unknown cardState falls back to New. Unknown keys (e.g. Cosmos system
    properties) are dropped.
    """
    doc = {key: value for key, value in raw.items() if key in CardState.model_fields}
    now_iso = utc_datetime_to_iso_z(now)

    for key in ("stability", "difficulty"):
        value = doc.get(key)
        if not isinstance(value, (int, float)) or value < 0:
            doc[key] = 0.0
    for key in ("intervalDays", "reviewCount", "elapsedDays", "scheduledDays", "learningSteps", "lapses"):
        value = doc.get(key)
        if not isinstance(value, (int, float)) or value < 0:
            doc[key] = 0
        else:
            doc[key] = int(value)

    if not isinstance(doc.get("easeFactor"), (int, float)):
        doc["easeFactor"] = LEGACY_EASE_FACTOR

    doc["nextReview"] = _repair_timestamp(doc.get("nextReview"), now_iso)
    if doc.get("lastReviewedAt") is not None:
        repaired = _repair_timestamp(doc["lastReviewedAt"], None)
        doc["lastReviewedAt"] = repaired
    if doc.get("updatedAt") is not None:
        doc["updatedAt"] = _repair_timestamp(doc["updatedAt"], now_iso)

    try:
        doc["cardState"] = CardPhase(doc.get("cardState", CardPhase.NEW))
    except ValueError:
        doc["cardState"] = CardPhase.NEW

    return CardState(**doc)


def _repair_timestamp(value, fallback: str | None) -> str | None:
    if not isinstance(value, str):
        return fallback
    try:
        parsed = parse_iso_z(value)
    except ValueError:
        return fallback
    if parsed < EPOCH:
        return fallback
    return utc_datetime_to_iso_z(parsed)


def upgrade_legacy_state(card: CardState) -> CardState:
    """Seed a memory state for rows written by the old SM-2 scheduler.

    Such rows have review history and an interval but no stability, and were never
    given a lifecycle phase. They are treated as graduated cards whose stability is
    their last interval.
    """
    if card.stability > 0 or card.reviewCount == 0 or card.cardState != CardPhase.NEW:
        return card
    return card.model_copy(
        update={
            "stability": float(max(card.intervalDays, 1)),
            "difficulty": difficulty_from_ease(card.easeFactor),
            "cardState": CardPhase.REVIEW,
        }
    )
