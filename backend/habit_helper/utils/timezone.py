"""
Timezone Utilities - Centralized local calendar handling
"""
from datetime import datetime
import pytz

from habit_helper.core.config import settings


def get_local_tz():
    """
    Get the configured application timezone

    Returns:
        pytz timezone for settings.APP_TIMEZONE
    """
    return pytz.timezone(settings.APP_TIMEZONE)


def get_local_now() -> datetime:
    """
    Get current datetime in the local timezone

    Returns:
        Timezone-aware datetime object
    """
    return datetime.now(get_local_tz())


def to_local(value: datetime) -> datetime:
    """
    Convert a datetime to the local timezone.
    Naive values are assumed to be UTC, which is how the store reports them.
    """
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(get_local_tz())


def get_day_start(now: datetime) -> datetime:
    """
    Get local midnight of the calendar day containing `now`

    Returns:
        Timezone-aware datetime at 00:00 local time
    """
    local = to_local(now)
    tz = get_local_tz()
    return tz.localize(datetime(local.year, local.month, local.day))
