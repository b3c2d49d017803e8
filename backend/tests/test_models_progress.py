"""Unit tests for card state defaults, normalisation and legacy upgrade."""

import pytest

from tango.models import (
    CardPhase,
    CardState,
    QuizSettings,
    QuizSettingsUpdate,
    default_card_state,
    is_new_card,
    merge_quiz_settings,
    normalize_card_state,
    upgrade_legacy_state,
)
from tango.srs.fsrs import difficulty_from_ease

from conftest import NOW, USER_ID


def test_default_card_state_is_new_and_due_now():
    card = default_card_state("w1", USER_ID, NOW)
    assert card.cardState == CardPhase.NEW
    assert card.nextReview == "2025-03-01T09:00:00Z"
    assert card.reviewCount == 0
    assert card.lapses == 0
    assert card.lastReviewedAt is None
    assert card.is_due(NOW)
    assert is_new_card(card)
    assert is_new_card(None)


def test_normalize_repairs_malformed_values():
    card = normalize_card_state(
        {
            "wordId": "w1",
            "userId": USER_ID,
            "nextReview": "garbage",
            "lastReviewedAt": 12345,
            "stability": -1,
            "difficulty": "hard",
            "intervalDays": -4,
            "lapses": 2.0,
            "cardState": 42,
            "_etag": '"x"',
        },
        NOW,
    )

    assert card.nextReview == "2025-03-01T09:00:00Z"
    assert card.lastReviewedAt is None
    assert card.stability == 0.0
    assert card.difficulty == 0.0
    assert card.intervalDays == 0
    assert card.lapses == 2
    assert card.cardState == CardPhase.NEW


def test_normalize_rejects_pre_epoch_due_date():
    card = normalize_card_state(
        {"wordId": "w1", "userId": USER_ID, "nextReview": "1900-01-01T00:00:00Z"},
        NOW,
    )
    assert card.nextReview == "2025-03-01T09:00:00Z"


def test_normalize_keeps_fractional_second_timestamps():
    card = normalize_card_state(
        {"wordId": "w1", "userId": USER_ID, "nextReview": "2025-03-02T10:00:00.500Z", "cardState": 2},
        NOW,
    )
    assert card.nextReview == "2025-03-02T10:00:00Z"
    assert card.cardState == CardPhase.REVIEW


def test_upgrade_legacy_sm2_row():
    legacy = CardState(
        wordId="w1",
        userId=USER_ID,
        intervalDays=6,
        easeFactor=2.36,
        reviewCount=2,
        lastReviewedAt="2025-02-23T09:00:00Z",
    )

    upgraded = upgrade_legacy_state(legacy)

    assert upgraded.cardState == CardPhase.REVIEW
    assert upgraded.stability == 6.0
    assert upgraded.difficulty == pytest.approx(difficulty_from_ease(2.36))
    assert not is_new_card(upgraded)


def test_upgrade_leaves_current_rows_alone():
    fresh = default_card_state("w1", USER_ID, NOW)
    assert upgrade_legacy_state(fresh) is fresh

    current = CardState(wordId="w1", userId=USER_ID, reviewCount=1, stability=2.0, difficulty=5.0,
                        cardState=CardPhase.LEARNING)
    assert upgrade_legacy_state(current) is current


def test_merge_quiz_settings_clears_filters_only():
    current = QuizSettings(newPerDay=10, jlptFilter=3, priorityFilter=1)

    merged = merge_quiz_settings(
        current,
        QuizSettingsUpdate.model_validate({"jlptFilter": None, "newPerDay": None, "sessionSize": 30}),
    )

    assert merged.jlptFilter is None
    assert merged.priorityFilter == 1
    assert merged.newPerDay == 10
    assert merged.sessionSize == 30


def test_quiz_settings_reject_invalid_leech_threshold():
    with pytest.raises(ValueError):
        QuizSettings(leechThreshold=0)
