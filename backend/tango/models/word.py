"""Word models for API requests and responses."""

from pydantic import BaseModel, Field
from uuid import uuid4

from tango.models.progress import CardState
from tango.srs.time import utc_now_iso


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


class WordBase(BaseModel):
    """Base word model with common fields."""

    term: str = Field(..., min_length=1, max_length=200, description="The word as written")
    reading: str | None = Field(None, max_length=200, description="Kana reading")
    meaning: str = Field(..., min_length=1, max_length=2000, description="Meaning in the study language")
    jlptLevel: int | None = Field(None, ge=1, le=5, description="JLPT level (1 = N1 .. 5 = N5)")


class WordCreate(WordBase):
    """Model for creating a new word."""

    priority: int = Field(2, ge=1, le=3, description="1 high, 2 mid, 3 low")


class Word(WordBase):
    """Full word model as stored, including the user's annotations.

    Leech and mastery flags are per-user annotations kept on the word,
    not on the CardState.
    """

    id: str = Field(default_factory=generate_uuid, description="Unique identifier")
    userId: str = Field(..., description="Owner user ID (partition key)")
    priority: int = Field(2, ge=1, le=3, description="1 high, 2 mid, 3 low")
    mastered: bool = False
    masteredAt: str | None = None
    isLeech: bool = False
    leechAt: str | None = None
    createdAt: str = Field(default_factory=utc_now_iso, description="Creation timestamp")
    updatedAt: str = Field(default_factory=utc_now_iso, description="Last update timestamp")


class WordResponse(Word):
    """Word response model returned by API."""

    pass


class WordListResponse(BaseModel):
    """Response containing a list of words."""

    words: list[WordResponse]
    count: int


class WordWithProgress(BaseModel):
    """A word paired with its card state (None when never rated)."""

    word: Word
    progress: CardState | None = None
