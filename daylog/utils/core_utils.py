# daylog/utils/core_utils.py
"""
Core utility functions that don't depend on database or models.
This module exists to break circular import dependencies.
"""

from datetime import datetime, timezone
from dateutil import tz


def now_utc() -> datetime:
    """
    Return current time as UTC-aware datetime.
    """
    return datetime.now(timezone.utc)


def now_local() -> datetime:
    """
    Return the current wall-clock time as a naive local datetime.
    Hour logs and period windows are expressed in local time.
    """
    return datetime.now(get_user_timezone()).replace(tzinfo=None)


def get_user_timezone():
    """
    Return a tzinfo object for the user's timezone.
    Falls back to UTC if the local zone cannot be determined.
    """
    try:
        return tz.tzlocal()
    except Exception:
        return timezone.utc


def format_hour(hour: int) -> str:
    """
    12-hour clock label for an hour of day: 0 -> "12 AM", 14 -> "2 PM".
    """
    suffix = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display} {suffix}"
