"""Unit tests for SRS time helpers."""

from datetime import datetime, timedelta, timezone

from tango.srs.time import (
    add_days,
    local_date_key,
    parse_iso_z,
    previous_date_key,
    resolve_timezone,
    utc_datetime_to_iso_z,
    whole_days_between,
)


def test_utc_datetime_to_iso_z_second_precision():
    dt = datetime(2025, 12, 13, 0, 0, 0, 999999, tzinfo=timezone.utc)
    assert utc_datetime_to_iso_z(dt) == "2025-12-13T00:00:00Z"


def test_utc_datetime_to_iso_z_converts_offsets():
    dt = datetime(2025, 12, 13, 9, 0, 0, tzinfo=timezone(timedelta(hours=9)))
    assert utc_datetime_to_iso_z(dt) == "2025-12-13T00:00:00Z"


def test_parse_iso_z_accepts_z_and_fractional_seconds():
    assert parse_iso_z("2025-12-13T00:00:00Z").tzinfo is not None
    assert parse_iso_z("2025-12-13T00:00:00.123456Z").tzinfo is not None


def test_add_days_rollover():
    now = datetime(2025, 12, 30, 0, 0, 0, tzinfo=timezone.utc)
    assert utc_datetime_to_iso_z(add_days(now, 4)) == "2026-01-03T00:00:00Z"


def test_whole_days_between():
    start = datetime(2025, 3, 1, 9, 0, 0, tzinfo=timezone.utc)
    assert whole_days_between(start, start + timedelta(days=2, hours=23)) == 2
    assert whole_days_between(start, start - timedelta(days=1)) == 0


def test_local_date_key_uses_user_timezone():
    now = datetime(2025, 3, 1, 16, 0, 0, tzinfo=timezone.utc)
    assert local_date_key(now, resolve_timezone("Asia/Tokyo")) == "2025-03-02"
    assert local_date_key(now, resolve_timezone("America/Los_Angeles")) == "2025-03-01"


def test_resolve_timezone_falls_back():
    assert str(resolve_timezone("Not/AZone", "Asia/Tokyo")) == "Asia/Tokyo"
    assert str(resolve_timezone(None)) == "UTC"
    assert str(resolve_timezone("", "Bad/Default")) == "UTC"


def test_previous_date_key():
    assert previous_date_key("2025-03-01") == "2025-02-28"
    assert previous_date_key("2024-03-01") == "2024-02-29"
