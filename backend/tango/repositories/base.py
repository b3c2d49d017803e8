"""Storage contract shared by the local and cloud backends.

The study service depends only on StudyRepository and the model shapes, never on a
backend's query language. Each backend guarantees:

- update_progress() is an atomic read-modify-write per user + word, so two ratings
  submitted for the same card cannot overwrite each other.
- update_word() is an atomic read-modify-write of a word document, so flags set by
  one request (mastered, leech, priority) are never lost to another.
- unlock_achievement() stores each achievement type at most once per user.
- Daily stats increments are atomic per user + day.
- Card states read from storage go through normalize_card_state().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from tango.models import (
    Achievement,
    AchievementType,
    CardState,
    DailyStats,
    QuizSettings,
    QuizSettingsUpdate,
    Word,
    WordCreate,
    WordWithProgress,
)
from tango.srs.rating import Rating
from tango.srs.stats import mastered_increments, practice_increments, review_increments


ProgressMutation = Callable[[CardState | None], CardState]
WordMutation = Callable[[Word], Word]


class WordNotFoundError(Exception):
    """Raised when a word is not found."""

    pass


class ConcurrencyConflictError(Exception):
    """Raised when an optimistic update keeps losing to concurrent writers."""

    pass


class StudyRepository(ABC):
    """Persistence for words, card states, quiz settings and daily stats."""

    # Words

    @abstractmethod
    def create_word(self, user_id: str, word_create: WordCreate) -> Word:
        """Create a new word for a user."""

    @abstractmethod
    def get_word(self, user_id: str, word_id: str) -> Word:
        """Get a word by ID. Raises WordNotFoundError."""

    @abstractmethod
    def list_words(self, user_id: str, include_mastered: bool = True) -> list[Word]:
        """List a user's words, newest first."""

    @abstractmethod
    def update_word(self, user_id: str, word_id: str, mutate: WordMutation) -> Word:
        """Atomically apply `mutate` to the stored word and persist the result.

        `mutate` may run more than once, so it should only change the word it is
        given. Raises WordNotFoundError.
        """

    @abstractmethod
    def delete_word(self, user_id: str, word_id: str) -> None:
        """Delete a word and its card state. Raises WordNotFoundError."""

    # Card state

    @abstractmethod
    def get_progress(self, user_id: str, word_id: str) -> CardState | None:
        """Card state of a word, or None when it was never rated."""

    @abstractmethod
    def get_progress_by_ids(self, user_id: str, word_ids: list[str]) -> dict[str, CardState]:
        """Card states keyed by word ID; words never rated are absent."""

    @abstractmethod
    def update_progress(
        self, user_id: str, word_id: str, mutate: ProgressMutation
    ) -> tuple[CardState | None, CardState]:
        """Atomically apply `mutate` to the stored card state and persist the result.

        Returns:
            (previous state or None, new state)
        """

    # Settings

    @abstractmethod
    def get_quiz_settings(self, user_id: str) -> QuizSettings:
        """Quiz settings, or the defaults when the user never saved any."""

    @abstractmethod
    def update_quiz_settings(self, user_id: str, update: QuizSettingsUpdate) -> QuizSettings:
        """Merge a partial update into the stored settings."""

    # Achievements

    @abstractmethod
    def get_achievements(self, user_id: str) -> list[Achievement]:
        """Unlocked achievements, most recent first."""

    @abstractmethod
    def unlock_achievement(
        self, user_id: str, achievement_type: AchievementType, unlocked_at: str
    ) -> Achievement | None:
        """Store an achievement. Returns None when the user already had it."""

    # Daily stats

    @abstractmethod
    def get_daily_stats(self, user_id: str, date: str) -> DailyStats | None:
        """Counters for a local date key, or None before the first event of that day."""

    @abstractmethod
    def get_daily_stats_range(self, user_id: str, start: str, end: str) -> list[DailyStats]:
        """Counters for start <= date <= end, oldest first."""

    @abstractmethod
    def _increment_stats(self, user_id: str, date: str, deltas: dict[str, int]) -> None:
        """Atomically add `deltas` to the day's counters, creating the day if needed."""

    def increment_daily_stats(self, user_id: str, date: str, was_new: bool, rating: Rating) -> None:
        """Count one graded review. Call exactly once per review."""
        self._increment_stats(user_id, date, review_increments(was_new, rating))

    def increment_practice_stats(self, user_id: str, date: str, known: bool) -> None:
        self._increment_stats(user_id, date, practice_increments(known))

    def increment_mastered_stats(self, user_id: str, date: str) -> None:
        self._increment_stats(user_id, date, mastered_increments())

    def list_words_with_progress(self, user_id: str) -> list[WordWithProgress]:
        """Non-mastered words joined with their card states."""
        words = self.list_words(user_id, include_mastered=False)
        progress = self.get_progress_by_ids(user_id, [word.id for word in words])
        return [WordWithProgress(word=word, progress=progress.get(word.id)) for word in words]

    def count_mastered_words(self, user_id: str) -> int:
        return sum(1 for word in self.list_words(user_id) if word.mastered)
