"""Achievement rules.

earned_achievements() looks at a snapshot of a user's study history and returns
every achievement whose condition currently holds. Working out which of those are
new, and storing them, is the study service's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from tango.models.achievement import AchievementType
from tango.models.quiz import DailyStats
from tango.srs.stats import compute_weighted_accuracy, empty_stats

# Mastered words needed per milestone
MASTERED_MILESTONES: dict[AchievementType, int] = {
    AchievementType.WORDS_50: 50,
    AchievementType.WORDS_100: 100,
    AchievementType.WORDS_250: 250,
    AchievementType.WORDS_500: 500,
    AchievementType.WORDS_1000: 1000,
    AchievementType.WORDS_2000: 2000,
    AchievementType.WORDS_5000: 5000,
}

# Consecutive active days
STREAK_MILESTONES: dict[AchievementType, int] = {
    AchievementType.STREAK_3: 3,
    AchievementType.STREAK_7: 7,
    AchievementType.STREAK_14: 14,
    AchievementType.STREAK_30: 30,
    AchievementType.STREAK_60: 60,
    AchievementType.STREAK_100: 100,
    AchievementType.STREAK_365: 365,
}

# Graded reviews over the whole history
REVIEW_MILESTONES: dict[AchievementType, int] = {
    AchievementType.REVIEWS_500: 500,
    AchievementType.REVIEWS_1000: 1000,
    AchievementType.REVIEWS_5000: 5000,
}

# Graded reviews in one local day
DAILY_MILESTONES: dict[AchievementType, int] = {
    AchievementType.DAILY_50: 50,
    AchievementType.DAILY_100: 100,
}

PERFECT_SESSION_MIN_REVIEWS = 10
# Earliest date key read when totalling a user's reviews
HISTORY_START = "1970-01-01"
WEEK_DAYS = 7
WEEK_ACCURACY_TARGET = 80


@dataclass(frozen=True)
class AchievementSnapshot:
    """What the achievement rules look at.

    `week` holds the stored days among the last WEEK_DAYS local days, today
    included.
    """

    today: DailyStats
    week: list[DailyStats]
    mastered_count: int
    streak_days: int
    total_reviews: int


def combine_stats(days: Iterable[DailyStats], user_id: str, date: str) -> DailyStats:
    """Sum the counters of several days into one DailyStats dated `date`."""
    combined = empty_stats(user_id, date)
    counters = [name for name in DailyStats.model_fields if name.endswith("Count")]
    for day in days:
        combined = combined.model_copy(
            update={name: getattr(combined, name) + getattr(day, name) for name in counters}
        )
    return combined


def _perfect_day(today: DailyStats) -> bool:
    return today.reviewCount >= PERFECT_SESSION_MIN_REVIEWS and today.againCount == 0


def _accurate_week(snapshot: AchievementSnapshot) -> bool:
    if snapshot.streak_days < WEEK_DAYS:
        return False
    week = combine_stats(snapshot.week, snapshot.today.userId, snapshot.today.date)
    return week.reviewCount > 0 and compute_weighted_accuracy(week) >= WEEK_ACCURACY_TARGET


def earned_achievements(snapshot: AchievementSnapshot) -> list[AchievementType]:
    """Achievements whose condition holds, in AchievementType order."""
    earned = set()
    if snapshot.total_reviews > 0 or snapshot.today.reviewCount > 0:
        earned.add(AchievementType.FIRST_QUIZ)
    earned.update(t for t, n in MASTERED_MILESTONES.items() if snapshot.mastered_count >= n)
    earned.update(t for t, n in STREAK_MILESTONES.items() if snapshot.streak_days >= n)
    earned.update(t for t, n in REVIEW_MILESTONES.items() if snapshot.total_reviews >= n)
    earned.update(t for t, n in DAILY_MILESTONES.items() if snapshot.today.reviewCount >= n)
    if _perfect_day(snapshot.today):
        earned.add(AchievementType.PERFECT_SESSION)
    if _accurate_week(snapshot):
        earned.add(AchievementType.ACCURACY_WEEK_80)
    return [t for t in AchievementType if t in earned]
