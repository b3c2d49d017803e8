"""Request-scoped dependencies shared by the routers."""

from fastapi import Header

from tango.config import get_app_settings
from tango.srs.time import local_date_key, resolve_timezone, utc_now


def get_user_id(x_user_id: str = Header(..., min_length=1, description="User ID header")) -> str:
    """Extract user ID from header."""
    return x_user_id


def get_date_key(
    x_timezone: str | None = Header(None, description="IANA time zone of the client, e.g. Asia/Tokyo"),
) -> str:
    """Local calendar day (YYYY-MM-DD) of the request, used for daily limits and stats."""
    tz = resolve_timezone(x_timezone, get_app_settings().default_timezone)
    return local_date_key(utc_now(), tz)
