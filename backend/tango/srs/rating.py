"""Review ratings and the fixed quality lookup.

The study flow reports recall on a 0-5 "quality" scale. The scheduler only knows
four ordinal ratings, so quality is bucketed with a fixed table:

    0, 1, 2 -> Again
    3       -> Hard
    4       -> Good
    5       -> Easy

Values outside the table are rejected rather than clamped, so that a preview shown
to the user can never disagree with the schedule that is committed.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Literal

from .errors import InvalidRatingError


RatingName = Literal["again", "hard", "good", "easy"]


class Rating(IntEnum):
    """User's self-assessed recall, ordered Again < Hard < Good < Easy."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @property
    def label(self) -> RatingName:
        return self.name.lower()  # type: ignore[return-value]


_QUALITY_TO_RATING: dict[int, Rating] = {
    0: Rating.AGAIN,
    1: Rating.AGAIN,
    2: Rating.AGAIN,
    3: Rating.HARD,
    4: Rating.GOOD,
    5: Rating.EASY,
}

_RATING_TO_QUALITY: dict[Rating, int] = {
    Rating.AGAIN: 0,
    Rating.HARD: 3,
    Rating.GOOD: 4,
    Rating.EASY: 5,
}


def rating_from_quality(quality: int) -> Rating:
    """Map a 0-5 quality score onto a Rating.

    Raises:
        InvalidRatingError: If quality is not an integer in 0..5
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidRatingError(f"quality must be an integer 0-5, got {quality!r}")
    try:
        return _QUALITY_TO_RATING[quality]
    except KeyError:
        raise InvalidRatingError(f"quality must be between 0 and 5, got {quality}") from None


def quality_for_rating(rating: Rating) -> int:
    """Canonical quality score recorded for a rating."""
    return _RATING_TO_QUALITY[parse_rating(rating)]


def parse_rating(value: Rating | int | str) -> Rating:
    """Coerce a Rating, its number (1-4) or its name ("good") to a Rating.

    Raises:
        InvalidRatingError: For anything else
    """
    if isinstance(value, Rating):
        return value
    if isinstance(value, str):
        try:
            return Rating[value.strip().upper()]
        except KeyError:
            raise InvalidRatingError(f"Unknown rating: {value!r}") from None
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return Rating(value)
        except ValueError:
            raise InvalidRatingError(f"rating must be between 1 and 4, got {value}") from None
    raise InvalidRatingError(f"Unsupported rating value: {value!r}")
