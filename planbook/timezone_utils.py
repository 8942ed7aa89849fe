"""
Timezone utilities for Planbook.

Events hold naive wall-clock datetimes; the zone belongs to the calendar
that owns them. These helpers attach a calendar's zone to a wall-clock
value when an instant is needed and strip it again afterwards.
"""

from datetime import datetime, timedelta
from typing import Optional
import pytz

from .errors import InvalidInput


def get_timezone(timezone_name: str):
    """
    Get a pytz timezone object for an IANA zone id.

    Raises:
        InvalidInput: if the name is empty or not a known zone.
    """
    if not timezone_name:
        raise InvalidInput("Timezone cannot be empty")
    try:
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        raise InvalidInput(f"Invalid timezone: {timezone_name}")


def is_valid_timezone(timezone_name: str) -> bool:
    return timezone_name in pytz.all_timezones_set


def to_utc_datetime(dt: datetime, timezone_name: str) -> datetime:
    """
    Convert a naive wall-clock datetime in the given zone to UTC.

    Args:
        dt: A naive datetime representing local time in timezone_name.
        timezone_name: IANA zone id the wall-clock value belongs to.

    Returns:
        A timezone-aware datetime in UTC.
    """
    if dt.tzinfo is None:
        local_dt = get_timezone(timezone_name).localize(dt)
        return local_dt.astimezone(pytz.UTC)
    return dt.astimezone(pytz.UTC)


def utc_to_local_naive(dt: datetime, timezone_name: str) -> datetime:
    """
    Convert an aware datetime to a naive wall-clock value in the given zone.
    """
    if dt.tzinfo is not None:
        return dt.astimezone(get_timezone(timezone_name)).replace(tzinfo=None)
    return dt


def convert_wall_clock(dt: datetime, from_timezone: str, to_timezone: str) -> datetime:
    """
    Re-express a wall-clock datetime from one zone in another zone.

    A 14:00 value in America/New_York becomes 11:00 in America/Los_Angeles;
    the instant is unchanged, only the wall clock moves.
    """
    if from_timezone == to_timezone:
        return dt
    return utc_to_local_naive(to_utc_datetime(dt, from_timezone), to_timezone)


def utc_offset(timezone_name: str, at: Optional[datetime] = None) -> timedelta:
    """
    Get the zone's UTC offset at a given instant (default: now).

    Args:
        timezone_name: IANA zone id.
        at: Naive wall-clock time in that zone, or an aware datetime.
    """
    tz = get_timezone(timezone_name)
    if at is None:
        return datetime.now(tz).utcoffset()
    if at.tzinfo is None:
        return tz.localize(at).utcoffset()
    return at.astimezone(tz).utcoffset()
