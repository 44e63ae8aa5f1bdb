"""
Date and time utilities for KidLedger.

Provides timezone-aware datetime helpers.
"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        datetime: Current datetime in UTC with tzinfo set to timezone.utc

    Note:
        Always use this function instead of datetime.now() to ensure
        timezone-aware timestamps across the application.
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Return ``value`` as an aware UTC datetime.

    SQLite drops tzinfo on round-trip, so naive values read back from the
    database are interpreted as UTC (that is how they were written).
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_month(now: Optional[datetime] = None) -> datetime:
    """
    Local midnight on the 1st of the month containing ``now``, as UTC.

    Args:
        now: Reference instant (default: current time). Naive values are
             taken as local wall-clock time.

    Returns:
        Aware UTC datetime of the month boundary

    Example:
        >>> start_of_month(datetime(2026, 10, 17, 15, 30, tzinfo=timezone.utc)).day  # in a UTC locale
        1
    """
    # astimezone() on a naive value assumes local time, on an aware one converts to local
    local_now = (now or datetime.now()).astimezone()
    boundary = local_now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return boundary.astimezone(timezone.utc)
