"""Unit tests for interval preview labels."""

from datetime import timedelta

import pytest

from tango.models import default_card_state
from tango.srs.preview import format_interval, preview_intervals
from tango.srs.rating import Rating
from tango.srs.scheduler import review_card

from conftest import NOW, USER_ID


@pytest.mark.parametrize(
    "delta,label",
    [
        (timedelta(seconds=0), "<1m"),
        (timedelta(seconds=29), "<1m"),
        (timedelta(seconds=30), "1m"),
        (timedelta(minutes=1), "1m"),
        (timedelta(minutes=59), "59m"),
        (timedelta(minutes=59, seconds=40), "1h"),
        (timedelta(hours=5), "5h"),
        (timedelta(hours=23), "23h"),
        (timedelta(hours=24), "1d"),
        (timedelta(days=29), "29d"),
        (timedelta(days=30), "1mo"),
        (timedelta(days=365), "12mo"),
    ],
)
def test_format_interval_boundaries(delta, label):
    assert format_interval(delta) == label


@pytest.mark.parametrize(
    "delta,label",
    [
        (timedelta(minutes=150), "3h"),
        (timedelta(minutes=90), "2h"),
        (timedelta(days=2, hours=12), "3d"),
        (timedelta(days=45), "2mo"),
        (timedelta(days=75), "3mo"),
    ],
)
def test_format_interval_rounds_halves_up(delta, label):
    assert format_interval(delta) == label


def test_preview_for_unrated_word():
    preview = preview_intervals(None, NOW)
    assert preview.again == "1m"
    assert preview.hard == "6m"
    assert preview.good == "10m"
    assert preview.easy.endswith("d")


def test_preview_matches_committed_schedule():
    card = review_card(default_card_state("w1", USER_ID, NOW), Rating.EASY, NOW)
    review_time = card.due_at

    preview = preview_intervals(card, review_time).model_dump()

    for rating in Rating:
        committed = review_card(card, rating, review_time)
        assert preview[rating.label] == format_interval(committed.due_at - review_time)


def test_preview_does_not_modify_card():
    card = default_card_state("w1", USER_ID, NOW)
    before = card.model_dump()
    preview_intervals(card, NOW)
    assert card.model_dump() == before
