"""Unit tests for daily counters, accuracy and streaks."""

import pytest

from tango.models import DailyStats
from tango.srs.errors import InvalidRatingError
from tango.srs.rating import Rating
from tango.srs.stats import (
    apply_mastered_to_stats,
    apply_practice_to_stats,
    apply_review_to_stats,
    compute_streak,
    compute_weighted_accuracy,
    empty_stats,
    is_active_day,
    review_increments,
)

from conftest import TODAY, USER_ID


def test_review_increments_for_new_word():
    assert review_increments(True, Rating.GOOD) == {"reviewCount": 1, "goodCount": 1, "newCount": 1}


def test_review_increments_split_again_counts():
    assert review_increments(True, Rating.AGAIN)["newAgainCount"] == 1
    assert "reviewAgainCount" not in review_increments(True, Rating.AGAIN)
    assert review_increments(False, Rating.AGAIN)["reviewAgainCount"] == 1
    assert "newCount" not in review_increments(False, Rating.AGAIN)


def test_review_increments_rejects_invalid_rating():
    with pytest.raises(InvalidRatingError):
        review_increments(False, 7)


def test_apply_review_returns_updated_copy():
    stats = empty_stats(USER_ID, TODAY)

    updated = apply_review_to_stats(stats, False, Rating.HARD)
    updated = apply_review_to_stats(updated, False, Rating.HARD)

    assert updated.reviewCount == 2
    assert updated.hardCount == 2
    assert stats.reviewCount == 0


def test_practice_and_mastered_counters():
    stats = empty_stats(USER_ID, TODAY)
    stats = apply_practice_to_stats(stats, known=True)
    stats = apply_practice_to_stats(stats, known=False)
    stats = apply_mastered_to_stats(stats)

    assert stats.practiceCount == 2
    assert stats.practiceKnownCount == 1
    assert stats.masteredInSessionCount == 1
    assert stats.reviewCount == 0


def test_weighted_accuracy_empty_day_is_100():
    assert compute_weighted_accuracy(None) == 100
    assert compute_weighted_accuracy(empty_stats(USER_ID, TODAY)) == 100


def test_weighted_accuracy_weights():
    stats = DailyStats(userId=USER_ID, date=TODAY, againCount=1, hardCount=1, goodCount=1, easyCount=1)
    # (0 + 20 + 50 + 80) / 4
    assert compute_weighted_accuracy(stats) == 38


def test_weighted_accuracy_rounds_halves_up():
    stats = DailyStats(userId=USER_ID, date=TODAY, againCount=3, goodCount=1)
    # 50 / 4 = 12.5
    assert compute_weighted_accuracy(stats) == 13


def test_weighted_accuracy_counts_mastered_words():
    stats = DailyStats(userId=USER_ID, date=TODAY, againCount=1, masteredInSessionCount=1)
    assert compute_weighted_accuracy(stats) == 50


def test_streak_counts_consecutive_days_ending_today():
    dates = ["2025-02-27", "2025-02-28", "2025-03-01"]
    assert compute_streak(dates, TODAY) == 3


def test_streak_continues_from_yesterday():
    assert compute_streak(["2025-02-27", "2025-02-28"], TODAY) == 2


def test_streak_broken():
    assert compute_streak(["2025-02-26", "2025-02-27"], TODAY) == 0
    assert compute_streak(["2025-02-25", "2025-03-01"], TODAY) == 1
    assert compute_streak([], TODAY) == 0


def test_streak_across_year_boundary():
    assert compute_streak(["2024-12-30", "2024-12-31", "2025-01-01"], "2025-01-01") == 3


def test_active_day():
    assert is_active_day(empty_stats(USER_ID, TODAY)) is False
    assert is_active_day(DailyStats(userId=USER_ID, date=TODAY, practiceCount=1)) is True
