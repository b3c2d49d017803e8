"""In-process (local) storage backend.

Documents are kept as plain dicts, the same shape the cloud backend stores, so
reads exercise the same normalisation path. Read-modify-write updates of one
word, card state, settings document or day are serialised by a lock taken from a
fixed pool, so the number of locks stays bounded however many words come and go.
"""

from __future__ import annotations

import logging
import threading

from tango.models import (
    Achievement,
    AchievementType,
    CardState,
    DailyStats,
    QuizSettings,
    QuizSettingsUpdate,
    Word,
    WordCreate,
    merge_quiz_settings,
    normalize_card_state,
)
from tango.repositories.base import (
    ProgressMutation,
    StudyRepository,
    WordMutation,
    WordNotFoundError,
)
from tango.srs.stats import apply_increments, empty_stats
from tango.srs.time import utc_now

logger = logging.getLogger(__name__)


class MemoryStudyRepository(StudyRepository):
    """Thread-safe in-memory repository."""

    # Size of the lock pool shared by all keys
    LOCK_STRIPES = 64

    def __init__(self):
        self._words: dict[tuple[str, str], dict] = {}
        self._progress: dict[tuple[str, str], dict] = {}
        self._settings: dict[str, dict] = {}
        self._stats: dict[tuple[str, str], dict] = {}
        self._achievements: dict[tuple[str, str], dict] = {}

        self._lock = threading.Lock()
        self._stripes = tuple(threading.Lock() for _ in range(self.LOCK_STRIPES))

    def _key_lock(self, kind: str, user_id: str, key: str) -> threading.Lock:
        """Lock guarding one document. Never hold two of these at once."""
        return self._stripes[hash((kind, user_id, key)) % self.LOCK_STRIPES]

    # Words

    def create_word(self, user_id: str, word_create: WordCreate) -> Word:
        word = Word(userId=user_id, **word_create.model_dump())
        with self._lock:
            self._words[(user_id, word.id)] = word.model_dump(mode="json")
        return word

    def get_word(self, user_id: str, word_id: str) -> Word:
        with self._lock:
            doc = self._words.get((user_id, word_id))
        if doc is None:
            raise WordNotFoundError(f"Word with ID {word_id} not found")
        return Word(**doc)

    def list_words(self, user_id: str, include_mastered: bool = True) -> list[Word]:
        with self._lock:
            docs = [doc for (owner, _), doc in self._words.items() if owner == user_id]
        words = [Word(**doc) for doc in docs if include_mastered or not doc["mastered"]]
        words.sort(key=lambda w: w.createdAt, reverse=True)
        return words

    def update_word(self, user_id: str, word_id: str, mutate: WordMutation) -> Word:
        with self._key_lock("word", user_id, word_id):
            updated = mutate(self.get_word(user_id, word_id))
            with self._lock:
                self._words[(user_id, word_id)] = updated.model_dump(mode="json")
        return updated

    def delete_word(self, user_id: str, word_id: str) -> None:
        with self._key_lock("word", user_id, word_id):
            with self._lock:
                if self._words.pop((user_id, word_id), None) is None:
                    raise WordNotFoundError(f"Word with ID {word_id} not found")
                self._progress.pop((user_id, word_id), None)

    # Card state

    def get_progress(self, user_id: str, word_id: str) -> CardState | None:
        with self._lock:
            doc = self._progress.get((user_id, word_id))
        if doc is None:
            return None
        return normalize_card_state(doc, utc_now())

    def get_progress_by_ids(self, user_id: str, word_ids: list[str]) -> dict[str, CardState]:
        now = utc_now()
        with self._lock:
            docs = {wid: self._progress.get((user_id, wid)) for wid in word_ids}
        return {wid: normalize_card_state(doc, now) for wid, doc in docs.items() if doc is not None}

    def update_progress(
        self, user_id: str, word_id: str, mutate: ProgressMutation
    ) -> tuple[CardState | None, CardState]:
        with self._key_lock("word", user_id, word_id):
            previous = self.get_progress(user_id, word_id)
            updated = mutate(previous)
            with self._lock:
                self._progress[(user_id, word_id)] = updated.model_dump(mode="json")
        return previous, updated

    # Settings

    def get_quiz_settings(self, user_id: str) -> QuizSettings:
        with self._lock:
            doc = self._settings.get(user_id)
        return QuizSettings(**doc) if doc is not None else QuizSettings()

    def update_quiz_settings(self, user_id: str, update: QuizSettingsUpdate) -> QuizSettings:
        with self._key_lock("settings", user_id, "quiz"):
            current = self.get_quiz_settings(user_id)
            merged = merge_quiz_settings(current, update)
            with self._lock:
                self._settings[user_id] = merged.model_dump(mode="json")
        logger.info("Quiz settings updated: user=%s", user_id)
        return merged

    # Achievements

    def get_achievements(self, user_id: str) -> list[Achievement]:
        with self._lock:
            docs = [doc for (owner, _), doc in self._achievements.items() if owner == user_id]
        return sorted((Achievement(**doc) for doc in docs), key=lambda a: a.unlockedAt, reverse=True)

    def unlock_achievement(
        self, user_id: str, achievement_type: AchievementType, unlocked_at: str
    ) -> Achievement | None:
        achievement = Achievement(userId=user_id, type=achievement_type, unlockedAt=unlocked_at)
        with self._lock:
            key = (user_id, achievement.type.value)
            if key in self._achievements:
                return None
            self._achievements[key] = achievement.model_dump(mode="json")
        logger.info("Achievement unlocked: user=%s, type=%s", user_id, achievement.type.value)
        return achievement

    # Daily stats

    def get_daily_stats(self, user_id: str, date: str) -> DailyStats | None:
        with self._lock:
            doc = self._stats.get((user_id, date))
        return DailyStats(**doc) if doc is not None else None

    def get_daily_stats_range(self, user_id: str, start: str, end: str) -> list[DailyStats]:
        with self._lock:
            docs = [
                doc for (owner, date), doc in self._stats.items()
                if owner == user_id and start <= date <= end
            ]
        return sorted((DailyStats(**doc) for doc in docs), key=lambda s: s.date)

    def _increment_stats(self, user_id: str, date: str, deltas: dict[str, int]) -> None:
        with self._key_lock("stats", user_id, date):
            current = self.get_daily_stats(user_id, date) or empty_stats(user_id, date)
            updated = apply_increments(current, deltas)
            with self._lock:
                self._stats[(user_id, date)] = updated.model_dump(mode="json")
