"""SRS helpers (ratings, memory model, time).

The scheduler, preview, leech and selection modules depend on the models package
and are imported from their own modules.
"""

from .errors import InvalidConfigurationError, InvalidRatingError
from .fsrs import DEFAULT_PARAMETERS, SchedulerParameters
from .rating import Rating, parse_rating, quality_for_rating, rating_from_quality
from .time import (
    utc_now,
    utc_now_iso,
    utc_datetime_to_iso_z,
    parse_iso_z,
    local_date_key,
    previous_date_key,
    resolve_timezone,
)

__all__ = [
    "InvalidConfigurationError",
    "InvalidRatingError",
    "DEFAULT_PARAMETERS",
    "SchedulerParameters",
    "Rating",
    "parse_rating",
    "quality_for_rating",
    "rating_from_quality",
    "utc_now",
    "utc_now_iso",
    "utc_datetime_to_iso_z",
    "parse_iso_z",
    "local_date_key",
    "previous_date_key",
    "resolve_timezone",
]
