"""Daily session selection.

Builds the study queue for one session from the user's non-mastered words:

1. Partition into review-due words and new (never rated) words.
2. Filter *new* words by the JLPT / priority settings. Review-due words are never
   filtered: once a word is introduced it keeps surfacing regardless of later
   filter changes.
3. Cap new words at what is left of today's new-word allowance.
4. Score and order the combined candidates, then cut the queue to
   min(limit, what is left of today's review allowance).

Scoring multiplies a priority weight, a JLPT proximity weight and an overdue
factor, so high-priority new words interleave with lightly overdue reviews instead
of all reviews coming first.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from tango.models.progress import CardState, is_new_card
from tango.models.quiz import DailyStats, QuizSettings
from tango.models.word import Word, WordWithProgress
from tango.srs.errors import InvalidConfigurationError
from tango.srs.time import SECONDS_PER_DAY, ensure_utc

DEFAULT_PRIORITY_WEIGHT = 0.7
NEW_WORD_FACTOR = 0.5

_PRIORITY_WEIGHTS = {1: 1.0, 2: 0.7, 3: 0.4}


@dataclass
class Partition:
    review_due: list[WordWithProgress] = field(default_factory=list)
    new: list[WordWithProgress] = field(default_factory=list)


def priority_weight(priority: int) -> float:
    """1 (high) = 1.0, 2 (mid) = 0.7, 3 (low) = 0.4."""
    return _PRIORITY_WEIGHTS.get(priority, DEFAULT_PRIORITY_WEIGHT)


def jlpt_weight(user_jlpt: int | None, word_jlpt: int | None) -> float:
    """Prefer words at, or one step around, the user's JLPT level.

    The gap is measured as word level minus user level: 0 = 1.0, +1 = 0.9,
    -1 = 0.8, anything above +1 = 0.6 and anything below -1 = 0.5.
    """
    if user_jlpt is None or word_jlpt is None:
        return 0.7
    diff = word_jlpt - user_jlpt
    if diff == 0:
        return 1.0
    if diff == 1:
        return 0.9
    if diff == -1:
        return 0.8
    if diff > 1:
        return 0.6
    return 0.5


def overdue_factor(progress: CardState | None, now: datetime) -> float:
    if is_new_card(progress):
        return NEW_WORD_FACTOR
    overdue_days = (now - progress.due_at).total_seconds() / SECONDS_PER_DAY
    if overdue_days < 0:
        return 0.8
    if overdue_days <= 3:
        return 1.0
    if overdue_days <= 7:
        return 1.2
    return 1.5


def quiz_score(item: WordWithProgress, user_jlpt: int | None, now: datetime) -> float:
    """Combined ordering score; higher comes first."""
    return (
        priority_weight(item.word.priority)
        * jlpt_weight(user_jlpt, item.word.jlptLevel)
        * overdue_factor(item.progress, now)
    )


def remaining_new(settings: QuizSettings, today: DailyStats | None) -> int:
    return max(0, settings.newPerDay - (today.newCount if today else 0))


def remaining_reviews(settings: QuizSettings, today: DailyStats | None) -> int:
    return max(0, settings.maxReviewsPerDay - (today.reviewCount if today else 0))


def _check_limit(name: str, value: int) -> None:
    if value < 0:
        raise InvalidConfigurationError(f"{name} must be >= 0, got {value}")


def _passes_new_word_filters(word: Word, settings: QuizSettings) -> bool:
    if settings.jlptFilter is not None and word.jlptLevel != settings.jlptFilter:
        return False
    if settings.priorityFilter is not None and word.priority != settings.priorityFilter:
        return False
    return True


def partition_candidates(items: Iterable[WordWithProgress], now: datetime) -> Partition:
    """Split words into review-due and new; mastered and not-yet-due words are dropped."""
    now = ensure_utc(now)
    partition = Partition()
    for item in items:
        if item.word.mastered:
            continue
        if is_new_card(item.progress):
            partition.new.append(item)
        elif item.progress.is_due(now):
            partition.review_due.append(item)
    return partition


def select_due_words(
    candidates: list[WordWithProgress],
    limit: int,
    user_jlpt: int | None,
    now: datetime,
) -> list[WordWithProgress]:
    """Order candidates by quiz score (ties keep input order) and cut to `limit`."""
    _check_limit("limit", limit)
    now = ensure_utc(now)
    ranked = sorted(candidates, key=lambda item: quiz_score(item, user_jlpt, now), reverse=True)
    return ranked[:limit]


def build_due_queue(
    items: Iterable[WordWithProgress],
    settings: QuizSettings,
    today: DailyStats | None,
    limit: int,
    now: datetime,
) -> list[WordWithProgress]:
    """Select the words for one graded study session.

    Never returns more than min(limit, maxReviewsPerDay - reviews done today) words,
    and never more new words than newPerDay - new words introduced today.
    """
    _check_limit("limit", limit)
    partition = partition_candidates(items, now)

    new_words = [item for item in partition.new if _passes_new_word_filters(item.word, settings)]
    capped_new = new_words[: remaining_new(settings, today)]

    effective_limit = min(limit, remaining_reviews(settings, today))
    return select_due_words(partition.review_due + capped_new, effective_limit, settings.jlptFilter, now)


def count_due(
    items: Iterable[WordWithProgress],
    settings: QuizSettings,
    today: DailyStats | None,
    now: datetime,
) -> int:
    """Number of words a session could show right now (badge count)."""
    partition = partition_candidates(items, now)
    new_count = sum(1 for item in partition.new if _passes_new_word_filters(item.word, settings))
    total = len(partition.review_due) + min(new_count, remaining_new(settings, today))
    return min(total, remaining_reviews(settings, today))


def select_practice_words(
    words: Iterable[Word],
    count: int,
    jlpt_filter: int | None,
    rng: random.Random | None = None,
) -> list[Word]:
    """Pick words for ungraded practice: no due-date gating, weighted random order."""
    _check_limit("count", count)
    rng = rng or random.Random()
    pool = [
        word
        for word in words
        if not word.mastered and (jlpt_filter is None or word.jlptLevel == jlpt_filter)
    ]
    scored = [
        (priority_weight(word.priority) * jlpt_weight(jlpt_filter, word.jlptLevel) * (0.5 + rng.random()), word)
        for word in pool
    ]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [word for _, word in scored[:count]]
