"""Leech detection.

A leech is a word that keeps lapsing after it has graduated. Once its lapse count
reaches the user's threshold the word is flagged so the UI can point it out. The
flag lives on the Word (a per-user annotation), never on the CardState, which keeps
the scheduler free of side effects.
"""

from __future__ import annotations

from datetime import datetime

from tango.models.progress import CardState
from tango.models.word import Word
from tango.srs.errors import InvalidConfigurationError
from tango.srs.time import utc_datetime_to_iso_z, utc_now


def is_leech(card: CardState | None, leech_threshold: int) -> bool:
    """Whether a card's lapse count has reached the threshold."""
    _check_threshold(leech_threshold)
    return card is not None and card.lapses >= leech_threshold


def check_and_mark_leech(
    card: CardState | None,
    word: Word,
    leech_threshold: int,
    now: datetime | None = None,
) -> bool:
    """Flag `word` as a leech the first time its card crosses the threshold.

    `word` is updated in place (isLeech, leechAt, updatedAt). Returns True only on
    the call that set the flag; later calls return False until clear_leech().

    Raises:
        InvalidConfigurationError: If leech_threshold <= 0
    """
    if not is_leech(card, leech_threshold) or word.isLeech:
        return False

    now_iso = utc_datetime_to_iso_z(now) if now is not None else utc_datetime_to_iso_z(utc_now())
    word.isLeech = True
    word.leechAt = now_iso
    word.updatedAt = now_iso
    return True


def clear_leech(word: Word, now: datetime | None = None) -> Word:
    """Remove the leech flag (user acknowledged or rewrote the word) and return the word."""
    word.isLeech = False
    word.leechAt = None
    word.updatedAt = utc_datetime_to_iso_z(now) if now is not None else utc_datetime_to_iso_z(utc_now())
    return word


def _check_threshold(leech_threshold: int) -> None:
    if leech_threshold <= 0:
        raise InvalidConfigurationError(f"leech_threshold must be >= 1, got {leech_threshold}")
