"""Daily counters, weighted accuracy and study streaks.

The apply_* helpers return updated copies. Storage adapters use them for their
read-modify-write path, so both backends count a review the same way.
"""

from __future__ import annotations

import math
from typing import Iterable

from tango.models.quiz import DailyStats
from tango.srs.rating import Rating, parse_rating
from tango.srs.time import previous_date_key

# Weighted accuracy on a 0-100 scale.
ACCURACY_WEIGHTS: dict[Rating, int] = {
    Rating.AGAIN: 0,
    Rating.HARD: 20,
    Rating.GOOD: 50,
    Rating.EASY: 80,
}
MASTERED_ACCURACY_WEIGHT = 100

_RATING_COUNTERS: dict[Rating, str] = {
    Rating.AGAIN: "againCount",
    Rating.HARD: "hardCount",
    Rating.GOOD: "goodCount",
    Rating.EASY: "easyCount",
}

# Streaks are looked up over at most this many recent days.
STREAK_LOOKBACK_DAYS = 400


def empty_stats(user_id: str, date: str) -> DailyStats:
    return DailyStats(userId=user_id, date=date)


def review_increments(was_new: bool, rating: Rating | int | str) -> dict[str, int]:
    """Counter deltas for one graded review."""
    rating = parse_rating(rating)
    is_again = rating == Rating.AGAIN
    deltas = {
        "reviewCount": 1,
        _RATING_COUNTERS[rating]: 1,
    }
    if was_new:
        deltas["newCount"] = 1
    if is_again:
        deltas["reviewAgainCount" if not was_new else "newAgainCount"] = 1
    return deltas


def practice_increments(known: bool) -> dict[str, int]:
    deltas = {"practiceCount": 1}
    if known:
        deltas["practiceKnownCount"] = 1
    return deltas


def mastered_increments() -> dict[str, int]:
    return {"masteredInSessionCount": 1}


def apply_increments(stats: DailyStats, deltas: dict[str, int]) -> DailyStats:
    update = {key: getattr(stats, key) + value for key, value in deltas.items()}
    return stats.model_copy(update=update)


def apply_review_to_stats(stats: DailyStats, was_new: bool, rating: Rating | int | str) -> DailyStats:
    return apply_increments(stats, review_increments(was_new, rating))


def apply_practice_to_stats(stats: DailyStats, known: bool) -> DailyStats:
    return apply_increments(stats, practice_increments(known))


def apply_mastered_to_stats(stats: DailyStats) -> DailyStats:
    return apply_increments(stats, mastered_increments())


def compute_weighted_accuracy(stats: DailyStats | None) -> int:
    """Weighted accuracy (0-100, halves rounded up) for a day; a day without ratings is 100."""
    if stats is None:
        return 100
    counts = {rating: getattr(stats, counter) for rating, counter in _RATING_COUNTERS.items()}
    total = sum(counts.values()) + stats.masteredInSessionCount
    if total == 0:
        return 100
    weighted = sum(ACCURACY_WEIGHTS[rating] * n for rating, n in counts.items())
    weighted += stats.masteredInSessionCount * MASTERED_ACCURACY_WEIGHT
    return math.floor(weighted / total + 0.5)


def compute_streak(active_dates: Iterable[str], today: str) -> int:
    """Consecutive active days ending today.

    If there is no activity yet today, the streak still counts when yesterday was
    active, so it does not read 0 first thing in the morning.
    """
    dates = set(active_dates)
    if not dates:
        return 0

    cursor = today
    if cursor not in dates:
        cursor = previous_date_key(today)
        if cursor not in dates:
            return 0

    streak = 0
    while cursor in dates:
        streak += 1
        cursor = previous_date_key(cursor)
    return streak


def is_active_day(stats: DailyStats) -> bool:
    return stats.reviewCount > 0 or stats.practiceCount > 0 or stats.masteredInSessionCount > 0
