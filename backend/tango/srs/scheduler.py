"""Card scheduling: (card state, rating, now) -> next card state.

review_card() is pure and deterministic. It never touches storage and never reads
the clock when `now` is given; persisting the result, counting the review and
running the leech check are the caller's job (see services.study_service).

The memory model itself is the fsrs library. This module converts between
CardState and fsrs.Card and keeps the bookkeeping the library does not track
(lapses, review count, elapsed and scheduled days).

Phase transitions:

    New         Again -> Learning (first learning step)
                Hard -> first learning step, halfway to the second
                Good -> next learning step, or Review if there is none left
                Easy -> Review
    Learning    Again -> first step again
    Relearning  Hard -> current step again
                Good -> next step, Review once the steps are exhausted
                Easy -> Review
    Review      Again -> Relearning (lapses + 1)
                Hard/Good/Easy -> Review with a longer interval

From one starting state the resulting due dates are ordered
Again <= Hard <= Good <= Easy.
"""

from __future__ import annotations

from datetime import datetime

from fsrs import Card, State
from fsrs import Rating as FsrsRating

from tango.models.progress import CardPhase, CardState
from tango.srs.fsrs import DEFAULT_PARAMETERS, SchedulerParameters
from tango.srs.rating import Rating, parse_rating
from tango.srs.time import (
    add_days,
    ensure_utc,
    utc_datetime_to_iso_z,
    utc_now,
    whole_days_between,
)


_STATE_FOR_PHASE = {
    CardPhase.LEARNING: State.Learning,
    CardPhase.REVIEW: State.Review,
    CardPhase.RELEARNING: State.Relearning,
}
_PHASE_FOR_STATE = {state: phase for phase, state in _STATE_FOR_PHASE.items()}

_GRADUATING_RATINGS = (Rating.HARD, Rating.GOOD, Rating.EASY)


def to_fsrs_card(card: CardState, now: datetime) -> Card:
    """Build the library card for `card`.

    New cards, and rows with no usable memory state, start over as a fresh
    learning card.
    """
    if card.cardState == CardPhase.NEW or card.stability <= 0 or card.difficulty <= 0:
        return Card(card_id=0, state=State.Learning, step=0, due=now)

    state = _STATE_FOR_PHASE[card.cardState]
    return Card(
        card_id=0,
        state=state,
        step=None if state == State.Review else card.learningSteps,
        stability=card.stability,
        difficulty=card.difficulty,
        due=card.due_at,
        last_review=card.last_reviewed or now,
    )


def _reviewed(source: Card, rating: Rating, now: datetime, params: SchedulerParameters) -> Card:
    result, _ = params.scheduler.review_card(source, FsrsRating(int(rating)), now)
    return result


def _graduated_days(source: Card, now: datetime, params: SchedulerParameters) -> dict[Rating, int]:
    """Day intervals of the ratings that land in Review, strictly increasing by rating."""
    days: dict[Rating, int] = {}
    floor = 0
    for rating in _GRADUATING_RATINGS:
        result = _reviewed(source, rating, now, params)
        if result.state != State.Review:
            continue
        interval = max((result.due - now).days, floor + 1)
        days[rating] = min(interval, params.maximum_interval)
        floor = interval
    return days


def review_card(
    card: CardState,
    rating: Rating | int | str,
    now: datetime | None = None,
    params: SchedulerParameters = DEFAULT_PARAMETERS,
) -> CardState:
    """Apply a rating to a card and return the new state.

    Args:
        card: Current state (use default_card_state() for a word never rated)
        rating: Rating, its number (1-4) or its name
        now: Review time; defaults to the current UTC time
        params: Scheduler constants

    Returns:
        A new CardState; the input is not modified.

    Raises:
        InvalidRatingError: If `rating` is not one of the four ratings
    """
    rating = parse_rating(rating)
    now = ensure_utc(now).replace(microsecond=0) if now is not None else utc_now()

    last = card.last_reviewed
    elapsed_days = whole_days_between(last, now) if last is not None else 0

    source = to_fsrs_card(card, now)
    result = _reviewed(source, rating, now, params)
    phase = _PHASE_FOR_STATE[result.state]

    if phase == CardPhase.REVIEW:
        interval_days = _graduated_days(source, now, params)[rating]
        due = add_days(now, interval_days)
    else:
        interval_days = 0
        due = result.due

    lapses = card.lapses
    if card.cardState == CardPhase.REVIEW and rating == Rating.AGAIN:
        lapses += 1

    now_iso = utc_datetime_to_iso_z(now)
    return card.model_copy(
        update={
            "nextReview": utc_datetime_to_iso_z(due),
            "intervalDays": interval_days,
            "reviewCount": card.reviewCount + 1,
            "lastReviewedAt": now_iso,
            "stability": result.stability,
            "difficulty": result.difficulty,
            "elapsedDays": elapsed_days,
            "scheduledDays": card.intervalDays,
            "learningSteps": result.step or 0,
            "lapses": lapses,
            "cardState": phase,
            "updatedAt": now_iso,
        }
    )
