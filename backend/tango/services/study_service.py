"""Study workflows on top of the scheduler and a StudyRepository.

This is the caller the scheduling core expects: it loads card state (falling back to
the New default), runs the pure scheduler, persists the result atomically, counts
the review exactly once in the user's local day, runs the leech check after a
lapse and unlocks any achievement the user has just earned.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from tango.models import (
    Achievement,
    AchievementType,
    CardState,
    DailyStats,
    Word,
    WordWithProgress,
    default_card_state,
    is_new_card,
    upgrade_legacy_state,
)
from tango.repositories import StudyRepository, get_study_repository
from tango.srs.achievements import HISTORY_START, WEEK_DAYS, AchievementSnapshot, earned_achievements
from tango.srs.fsrs import DEFAULT_PARAMETERS, SchedulerParameters
from tango.srs.leech import check_and_mark_leech
from tango.srs.preview import ReviewPreview, preview_intervals
from tango.srs.rating import Rating, parse_rating
from tango.srs.scheduler import review_card
from tango.srs.selection import build_due_queue, count_due, select_practice_words
from tango.srs.stats import (
    STREAK_LOOKBACK_DAYS,
    compute_streak,
    compute_weighted_accuracy,
    empty_stats,
    is_active_day,
)
from tango.srs.time import ensure_utc, utc_datetime_to_iso_z, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewResult:
    progress: CardState
    was_new: bool
    became_leech: bool
    new_achievements: list[AchievementType] = field(default_factory=list)


@dataclass(frozen=True)
class StudySummary:
    today: DailyStats
    accuracy: int
    streak_days: int
    due_count: int


def _now(now: datetime | None) -> datetime:
    return ensure_utc(now).replace(microsecond=0) if now is not None else utc_now()


class StudyService:
    """Review, queue and statistics operations for one storage backend."""

    def __init__(self, repository: StudyRepository, params: SchedulerParameters = DEFAULT_PARAMETERS):
        self.repository = repository
        self.params = params

    def record_review(
        self,
        user_id: str,
        word_id: str,
        rating: Rating | int | str,
        date_key: str,
        now: datetime | None = None,
    ) -> ReviewResult:
        """Apply a rating to a word and persist everything that follows from it.

        Raises:
            InvalidRatingError: If the rating is not recognised (nothing is written)
            WordNotFoundError: If the word does not exist
        """
        rating = parse_rating(rating)
        now = _now(now)
        self.repository.get_word(user_id, word_id)

        def apply(current: CardState | None) -> CardState:
            card = current if current is not None else default_card_state(word_id, user_id, now)
            return review_card(upgrade_legacy_state(card), rating, now, self.params)

        previous, updated = self.repository.update_progress(user_id, word_id, apply)
        was_new = is_new_card(previous)
        self.repository.increment_daily_stats(user_id, date_key, was_new, rating)

        became_leech = False
        if rating == Rating.AGAIN:
            became_leech = self._handle_again(user_id, word_id, previous, updated, now)

        new_achievements = self.check_achievements(user_id, date_key, now)

        logger.info(
            "Review recorded: user=%s, word=%s, rating=%s, state=%s, lapses=%d, next_review=%s",
            user_id,
            word_id,
            rating.label,
            updated.cardState.name,
            updated.lapses,
            updated.nextReview,
        )
        return ReviewResult(
            progress=updated,
            was_new=was_new,
            became_leech=became_leech,
            new_achievements=new_achievements,
        )

    def _handle_again(
        self,
        user_id: str,
        word_id: str,
        previous: CardState | None,
        updated: CardState,
        now: datetime,
    ) -> bool:
        """Raise a failed word to high priority and flag it once it becomes a leech."""
        previous_lapses = previous.lapses if previous is not None else 0
        lapsed = updated.lapses > previous_lapses
        threshold = self.repository.get_quiz_settings(user_id).leechThreshold if lapsed else None
        flagged = False

        def apply(word: Word) -> Word:
            nonlocal flagged
            if word.priority > 1:
                word.priority = 1
                word.updatedAt = utc_datetime_to_iso_z(now)
            flagged = lapsed and check_and_mark_leech(updated, word, threshold, now)
            return word

        self.repository.update_word(user_id, word_id, apply)
        if flagged:
            logger.info("Word marked as leech: user=%s, word=%s, lapses=%d", user_id, word_id, updated.lapses)
        return flagged

    def get_progress(self, user_id: str, word_id: str) -> CardState | None:
        self.repository.get_word(user_id, word_id)
        return self.repository.get_progress(user_id, word_id)

    def get_due_words(
        self,
        user_id: str,
        date_key: str,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> list[WordWithProgress]:
        """Ordered queue for a graded session (empty when everything is done)."""
        settings = self.repository.get_quiz_settings(user_id)
        today = self.repository.get_daily_stats(user_id, date_key)
        items = self.repository.list_words_with_progress(user_id)
        size = settings.sessionSize if limit is None else limit
        return build_due_queue(items, settings, today, size, _now(now))

    def get_due_count(self, user_id: str, date_key: str, now: datetime | None = None) -> int:
        settings = self.repository.get_quiz_settings(user_id)
        today = self.repository.get_daily_stats(user_id, date_key)
        items = self.repository.list_words_with_progress(user_id)
        return count_due(items, settings, today, _now(now))

    def get_practice_words(
        self,
        user_id: str,
        count: int | None = None,
        rng: random.Random | None = None,
    ) -> list[Word]:
        """Words for ungraded practice, regardless of due dates."""
        settings = self.repository.get_quiz_settings(user_id)
        words = self.repository.list_words(user_id, include_mastered=False)
        size = settings.sessionSize if count is None else count
        return select_practice_words(words, size, settings.jlptFilter, rng)

    def record_practice(self, user_id: str, word_id: str, known: bool, date_key: str) -> None:
        self.repository.get_word(user_id, word_id)
        self.repository.increment_practice_stats(user_id, date_key, known)

    def preview(self, user_id: str, word_id: str, now: datetime | None = None) -> ReviewPreview:
        """Interval labels for the four rating buttons of a word."""
        self.repository.get_word(user_id, word_id)
        now = _now(now)
        card = self.repository.get_progress(user_id, word_id)
        if card is not None:
            card = upgrade_legacy_state(card)
        return preview_intervals(card, now, self.params, word_id=word_id, user_id=user_id)

    def set_mastered(
        self,
        user_id: str,
        word_id: str,
        mastered: bool,
        date_key: str,
        in_session: bool = False,
        now: datetime | None = None,
    ) -> Word:
        """Mark a word mastered (removed from scheduling) or bring it back."""
        now = _now(now)
        now_iso = utc_datetime_to_iso_z(now)

        def apply(word: Word) -> Word:
            word.mastered = mastered
            word.masteredAt = now_iso if mastered else None
            word.updatedAt = now_iso
            return word

        saved = self.repository.update_word(user_id, word_id, apply)
        if mastered and in_session:
            self.repository.increment_mastered_stats(user_id, date_key)
        if mastered:
            self.check_achievements(user_id, date_key, now)
        return saved

    def check_achievements(
        self, user_id: str, date_key: str, now: datetime | None = None
    ) -> list[AchievementType]:
        """Unlock every achievement the user has newly earned and return those."""
        unlocked = {achievement.type for achievement in self.repository.get_achievements(user_id)}
        if len(unlocked) == len(AchievementType):
            return []

        history = self.repository.get_daily_stats_range(user_id, HISTORY_START, date_key)
        today = next((day for day in history if day.date == date_key), None) or empty_stats(user_id, date_key)
        week_start = (date.fromisoformat(date_key) - timedelta(days=WEEK_DAYS - 1)).isoformat()
        snapshot = AchievementSnapshot(
            today=today,
            week=[day for day in history if day.date >= week_start],
            mastered_count=self.repository.count_mastered_words(user_id),
            streak_days=compute_streak((day.date for day in history if is_active_day(day)), date_key),
            total_reviews=sum(day.reviewCount for day in history),
        )

        unlocked_at = utc_datetime_to_iso_z(_now(now))
        new = []
        for achievement_type in earned_achievements(snapshot):
            if achievement_type in unlocked:
                continue
            if self.repository.unlock_achievement(user_id, achievement_type, unlocked_at) is not None:
                new.append(achievement_type)
        return new

    def get_achievements(self, user_id: str) -> list[Achievement]:
        return self.repository.get_achievements(user_id)

    def get_summary(self, user_id: str, date_key: str, now: datetime | None = None) -> StudySummary:
        today = self.repository.get_daily_stats(user_id, date_key) or empty_stats(user_id, date_key)
        start = (date.fromisoformat(date_key) - timedelta(days=STREAK_LOOKBACK_DAYS)).isoformat()
        history = self.repository.get_daily_stats_range(user_id, start, date_key)
        streak = compute_streak((day.date for day in history if is_active_day(day)), date_key)
        return StudySummary(
            today=today,
            accuracy=compute_weighted_accuracy(today),
            streak_days=streak,
            due_count=self.get_due_count(user_id, date_key, now),
        )


def get_study_service() -> StudyService:
    """Study service bound to the configured repository."""
    return StudyService(get_study_repository())
