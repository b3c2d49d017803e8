"""Cosmos DB (cloud) storage backend.

Containers are partitioned by userId:

- words:          one document per word (id = word id)
- studyProgress:  one CardState per word (id = word id)
- quizSettings:   one document per user (id = "quiz-settings")
- dailyStats:     one document per user and local day (id = date key)
- achievements:   one document per unlocked achievement (id = achievement type)

Word and card state updates use optimistic concurrency on the document _etag. Daily
counters are bumped with patch "incr" operations, which Cosmos applies atomically.
"""

from __future__ import annotations

import logging
import threading

from azure.core import MatchConditions
from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import (
    CosmosAccessConditionFailedError,
    CosmosResourceExistsError,
    CosmosResourceNotFoundError,
)
from cachetools import TTLCache

from tango.db import (
    get_achievements_container,
    get_progress_container,
    get_settings_container,
    get_stats_container,
    get_words_container,
)
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
    ConcurrencyConflictError,
    ProgressMutation,
    StudyRepository,
    WordMutation,
    WordNotFoundError,
)
from tango.srs.stats import apply_increments, empty_stats
from tango.srs.time import utc_now, utc_now_iso

logger = logging.getLogger(__name__)

SETTINGS_DOC_ID = "quiz-settings"


class CosmosStudyRepository(StudyRepository):
    """Repository backed by Azure Cosmos DB."""

    # Attempts for an optimistic card state update before giving up
    MAX_UPDATE_ATTEMPTS = 5
    # Users whose settings are cached at once
    SETTINGS_CACHE_SIZE = 10000

    def __init__(
        self,
        words: ContainerProxy | None = None,
        progress: ContainerProxy | None = None,
        settings: ContainerProxy | None = None,
        stats: ContainerProxy | None = None,
        achievements: ContainerProxy | None = None,
        settings_ttl_seconds: int = 60,
    ):
        """Initialize the repository with optional containers (resolved lazily)."""
        self._words = words
        self._progress = progress
        self._settings = settings
        self._stats = stats
        self._achievements = achievements
        self._settings_cache: TTLCache[str, QuizSettings] = TTLCache(
            maxsize=self.SETTINGS_CACHE_SIZE, ttl=settings_ttl_seconds
        )
        self._cache_lock = threading.Lock()

    @property
    def words(self) -> ContainerProxy:
        if self._words is None:
            self._words = get_words_container()
        return self._words

    @property
    def progress(self) -> ContainerProxy:
        if self._progress is None:
            self._progress = get_progress_container()
        return self._progress

    @property
    def settings(self) -> ContainerProxy:
        if self._settings is None:
            self._settings = get_settings_container()
        return self._settings

    @property
    def stats(self) -> ContainerProxy:
        if self._stats is None:
            self._stats = get_stats_container()
        return self._stats

    @property
    def achievements(self) -> ContainerProxy:
        if self._achievements is None:
            self._achievements = get_achievements_container()
        return self._achievements

    # Words

    def create_word(self, user_id: str, word_create: WordCreate) -> Word:
        word = Word(userId=user_id, **word_create.model_dump())
        created = self.words.create_item(body=word.model_dump(mode="json"))
        return Word(**created)

    def get_word(self, user_id: str, word_id: str) -> Word:
        try:
            item = self.words.read_item(item=word_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            raise WordNotFoundError(f"Word with ID {word_id} not found")
        return Word(**item)

    def list_words(self, user_id: str, include_mastered: bool = True) -> list[Word]:
        query = "SELECT * FROM c WHERE c.userId = @userId"
        if not include_mastered:
            query += " AND (NOT IS_DEFINED(c.mastered) OR c.mastered = false)"
        query += " ORDER BY c.createdAt DESC"

        items = self.words.query_items(
            query=query,
            parameters=[{"name": "@userId", "value": user_id}],
            partition_key=user_id,
        )
        return [Word(**item) for item in items]

    def count_mastered_words(self, user_id: str) -> int:
        items = self.words.query_items(
            query="SELECT VALUE COUNT(1) FROM c WHERE c.userId = @userId AND c.mastered = true",
            parameters=[{"name": "@userId", "value": user_id}],
            partition_key=user_id,
        )
        return next(iter(items), 0)

    def update_word(self, user_id: str, word_id: str, mutate: WordMutation) -> Word:
        for attempt in range(1, self.MAX_UPDATE_ATTEMPTS + 1):
            try:
                item = self.words.read_item(item=word_id, partition_key=user_id)
            except CosmosResourceNotFoundError:
                raise WordNotFoundError(f"Word with ID {word_id} not found")
            updated = mutate(Word(**item))
            try:
                replaced = self.words.replace_item(
                    item=word_id,
                    body=updated.model_dump(mode="json"),
                    etag=item.get("_etag"),
                    match_condition=MatchConditions.IfNotModified,
                )
                return Word(**replaced)
            except CosmosAccessConditionFailedError:
                logger.warning("Concurrent word update: user=%s, word=%s, attempt=%d", user_id, word_id, attempt)
            except CosmosResourceNotFoundError:
                raise WordNotFoundError(f"Word with ID {word_id} not found")

        raise ConcurrencyConflictError(
            f"Word {word_id} changed concurrently {self.MAX_UPDATE_ATTEMPTS} times"
        )

    def delete_word(self, user_id: str, word_id: str) -> None:
        try:
            self.words.delete_item(item=word_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            raise WordNotFoundError(f"Word with ID {word_id} not found")
        try:
            self.progress.delete_item(item=word_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            pass  # never rated

    # Card state

    @staticmethod
    def _progress_doc(card: CardState) -> dict:
        return {"id": card.wordId, **card.model_dump(mode="json")}

    def _read_progress(self, user_id: str, word_id: str) -> dict | None:
        try:
            return self.progress.read_item(item=word_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            return None

    def get_progress(self, user_id: str, word_id: str) -> CardState | None:
        item = self._read_progress(user_id, word_id)
        if item is None:
            return None
        return normalize_card_state(item, utc_now())

    def get_progress_by_ids(self, user_id: str, word_ids: list[str]) -> dict[str, CardState]:
        if not word_ids:
            return {}
        now = utc_now()
        items = self.progress.query_items(
            query="SELECT * FROM c WHERE c.userId = @userId AND ARRAY_CONTAINS(@wordIds, c.wordId)",
            parameters=[
                {"name": "@userId", "value": user_id},
                {"name": "@wordIds", "value": list(word_ids)},
            ],
            partition_key=user_id,
        )
        result = {}
        for item in items:
            card = normalize_card_state(item, now)
            result[card.wordId] = card
        return result

    def update_progress(
        self, user_id: str, word_id: str, mutate: ProgressMutation
    ) -> tuple[CardState | None, CardState]:
        for attempt in range(1, self.MAX_UPDATE_ATTEMPTS + 1):
            item = self._read_progress(user_id, word_id)
            previous = normalize_card_state(item, utc_now()) if item is not None else None
            updated = mutate(previous)
            body = self._progress_doc(updated)
            try:
                if item is None:
                    self.progress.create_item(body=body)
                else:
                    self.progress.replace_item(
                        item=word_id,
                        body=body,
                        etag=item.get("_etag"),
                        match_condition=MatchConditions.IfNotModified,
                    )
                return previous, updated
            except (CosmosResourceExistsError, CosmosAccessConditionFailedError):
                logger.warning(
                    "Concurrent card update: user=%s, word=%s, attempt=%d", user_id, word_id, attempt
                )

        raise ConcurrencyConflictError(
            f"Card state for word {word_id} changed concurrently {self.MAX_UPDATE_ATTEMPTS} times"
        )

    # Settings

    def get_quiz_settings(self, user_id: str) -> QuizSettings:
        with self._cache_lock:
            cached = self._settings_cache.get(user_id)
        if cached is not None:
            return cached.model_copy()

        try:
            item = self.settings.read_item(item=SETTINGS_DOC_ID, partition_key=user_id)
            settings = QuizSettings(**item)
        except CosmosResourceNotFoundError:
            settings = QuizSettings()

        with self._cache_lock:
            self._settings_cache[user_id] = settings
        return settings.model_copy()

    def update_quiz_settings(self, user_id: str, update: QuizSettingsUpdate) -> QuizSettings:
        self.invalidate_settings(user_id)
        merged = merge_quiz_settings(self.get_quiz_settings(user_id), update)
        self.settings.upsert_item(
            body={
                "id": SETTINGS_DOC_ID,
                "userId": user_id,
                "updatedAt": utc_now_iso(),
                **merged.model_dump(mode="json"),
            }
        )
        with self._cache_lock:
            self._settings_cache[user_id] = merged
        logger.info("Quiz settings updated: user=%s", user_id)
        return merged.model_copy()

    def invalidate_settings(self, user_id: str) -> None:
        with self._cache_lock:
            self._settings_cache.pop(user_id, None)

    # Achievements

    def get_achievements(self, user_id: str) -> list[Achievement]:
        items = self.achievements.query_items(
            query="SELECT * FROM c WHERE c.userId = @userId ORDER BY c.unlockedAt DESC",
            parameters=[{"name": "@userId", "value": user_id}],
            partition_key=user_id,
        )
        return [Achievement(**item) for item in items]

    def unlock_achievement(
        self, user_id: str, achievement_type: AchievementType, unlocked_at: str
    ) -> Achievement | None:
        achievement = Achievement(userId=user_id, type=achievement_type, unlockedAt=unlocked_at)
        try:
            self.achievements.create_item(
                body={"id": achievement.type.value, **achievement.model_dump(mode="json")}
            )
        except CosmosResourceExistsError:
            return None
        logger.info("Achievement unlocked: user=%s, type=%s", user_id, achievement.type.value)
        return achievement

    # Daily stats

    def get_daily_stats(self, user_id: str, date: str) -> DailyStats | None:
        try:
            item = self.stats.read_item(item=date, partition_key=user_id)
        except CosmosResourceNotFoundError:
            return None
        return DailyStats(**item)

    def get_daily_stats_range(self, user_id: str, start: str, end: str) -> list[DailyStats]:
        items = self.stats.query_items(
            query=(
                "SELECT * FROM c WHERE c.userId = @userId "
                "AND c.date >= @start AND c.date <= @end ORDER BY c.date ASC"
            ),
            parameters=[
                {"name": "@userId", "value": user_id},
                {"name": "@start", "value": start},
                {"name": "@end", "value": end},
            ],
            partition_key=user_id,
        )
        return [DailyStats(**item) for item in items]

    def _patch_stats(self, user_id: str, date: str, deltas: dict[str, int]) -> None:
        operations = [{"op": "incr", "path": f"/{key}", "value": value} for key, value in deltas.items()]
        self.stats.patch_item(item=date, partition_key=user_id, patch_operations=operations)

    def _increment_stats(self, user_id: str, date: str, deltas: dict[str, int]) -> None:
        try:
            self._patch_stats(user_id, date, deltas)
            return
        except CosmosResourceNotFoundError:
            pass  # first event of the day

        first = apply_increments(empty_stats(user_id, date), deltas)
        try:
            self.stats.create_item(body={"id": date, **first.model_dump(mode="json")})
        except CosmosResourceExistsError:
            # Another request created the day in between; add on top of it
            self._patch_stats(user_id, date, deltas)
