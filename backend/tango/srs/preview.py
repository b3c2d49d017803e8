"""Interval preview shown on the rating buttons before the user answers."""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from pydantic import BaseModel

from tango.models.progress import CardState, default_card_state
from tango.srs.fsrs import DEFAULT_PARAMETERS, SchedulerParameters
from tango.srs.rating import Rating
from tango.srs.scheduler import review_card
from tango.srs.time import ensure_utc, utc_now

# Unit boundaries for every interval label in the app.
MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24
DAYS_PER_MONTH = 30

LESS_THAN_MINUTE = "<1m"


class ReviewPreview(BaseModel):
    """Formatted interval per rating."""

    again: str
    hard: str
    good: str
    easy: str


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_interval(delta: timedelta) -> str:
    """Format a time span as "<1m", "12m", "5h", "4d" or "3mo".

    Each unit is rounded half up before comparing against the next boundary, so
    59.6 minutes reads "1h", not "60m", and 150 minutes reads "3h".
    """
    minutes = _round_half_up(delta.total_seconds() / 60)
    if minutes < 1:
        return LESS_THAN_MINUTE
    if minutes < MINUTES_PER_HOUR:
        return f"{minutes}m"
    hours = _round_half_up(minutes / MINUTES_PER_HOUR)
    if hours < HOURS_PER_DAY:
        return f"{hours}h"
    days = _round_half_up(hours / HOURS_PER_DAY)
    if days < DAYS_PER_MONTH:
        return f"{days}d"
    return f"{_round_half_up(days / DAYS_PER_MONTH)}mo"


def preview_intervals(
    card: CardState | None,
    now: datetime | None = None,
    params: SchedulerParameters = DEFAULT_PARAMETERS,
    *,
    word_id: str = "preview",
    user_id: str = "preview",
) -> ReviewPreview:
    """Run the scheduler once per rating without persisting anything.

    A missing card previews as a brand-new one.
    """
    now = ensure_utc(now).replace(microsecond=0) if now is not None else utc_now()
    if card is None:
        card = default_card_state(word_id, user_id, now)

    labels = {
        rating.label: format_interval(review_card(card, rating, now, params).due_at - now)
        for rating in Rating
    }
    return ReviewPreview(**labels)
