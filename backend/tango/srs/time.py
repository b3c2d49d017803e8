"""UTC time helpers for SRS scheduling.

Persisted timestamps are UTC ISO strings with second precision and a trailing 'Z':
YYYY-MM-DDTHH:MM:SSZ

Daily statistics are bucketed by the user's *local* calendar day. The HTTP layer
derives that key once per request with local_date_key(); the scheduler core only
ever receives the precomputed string.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    """Return timezone-aware UTC 'now' truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def utc_now_iso() -> str:
    """Return current time as UTC ISO string with second precision and trailing 'Z'."""
    return utc_datetime_to_iso_z(utc_now())


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_datetime_to_iso_z(dt: datetime) -> str:
    """Format a datetime as UTC ISO string with second precision and trailing 'Z'."""
    dt = ensure_utc(dt).replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")


def parse_iso_z(s: str) -> datetime:
    """Parse an ISO-8601 string ending with 'Z' (or '+00:00') into UTC datetime.

    Accepts both second precision and fractional seconds.
    """
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(s))



def add_days(now: datetime, days: int) -> datetime:
    return now + timedelta(days=days)


def whole_days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from `earlier` to `later`, never negative."""
    seconds = (ensure_utc(later) - ensure_utc(earlier)).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // SECONDS_PER_DAY)


def resolve_timezone(tz_name: str | None, default: str = "UTC") -> ZoneInfo:
    """Look up an IANA zone, falling back to `default` for unknown names."""
    for name in (tz_name, default):
        if not name:
            continue
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            continue
    return ZoneInfo("UTC")


def local_date_key(now: datetime, tz: ZoneInfo) -> str:
    """Return the YYYY-MM-DD key of the local calendar day containing `now`."""
    return ensure_utc(now).astimezone(tz).date().isoformat()


def previous_date_key(date_key: str) -> str:
    """Return the key of the calendar day before `date_key`."""
    return (date.fromisoformat(date_key) - timedelta(days=1)).isoformat()
