"""
Centralized datetime and timezone utilities.

Stored timestamps are timezone-aware UTC. Naive datetimes coming from
callers or old snapshots are assumed to be UTC. "Today" for due-date checks
is the UTC calendar date; the local timezone is only used where the user's
wall clock matters (upcoming appointments, quiet hours).
"""

from datetime import datetime, date, timedelta
from typing import Optional, Union
import pytz

from config import settings


def get_local_tz() -> pytz.BaseTzInfo:
    """Get the configured local timezone."""
    return pytz.timezone(settings.timezone)


def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(pytz.UTC)


def get_local_now(now: Optional[datetime] = None) -> datetime:
    """Get current time in local timezone (naive)."""
    now = ensure_utc(now) if now is not None else utc_now()
    return now.astimezone(get_local_tz()).replace(tzinfo=None)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Args:
        dt: Aware or naive datetime (naive is taken as UTC)

    Returns:
        Aware UTC datetime, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)

    return dt.astimezone(pytz.UTC)


def parse_iso(value: Union[str, datetime, date, None]) -> Optional[datetime]:
    """
    Parse an ISO-8601 string into an aware UTC datetime.

    Accepts the 'Z' suffix and date-only strings (midnight UTC).
    Returns None for empty or unparseable input.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, date):
        return pytz.UTC.localize(datetime(value.year, value.month, value.day))

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        pass

    try:
        return pytz.UTC.localize(datetime.strptime(text, "%Y-%m-%d"))
    except ValueError:
        return None


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime as an ISO-8601 UTC string."""
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()


def utc_date_key(dt: datetime) -> str:
    """UTC calendar date portion of a timestamp, as YYYY-MM-DD."""
    return ensure_utc(dt).date().isoformat()


def utc_today(now: Optional[datetime] = None) -> date:
    """Current UTC calendar date."""
    now = ensure_utc(now) if now is not None else utc_now()
    return now.date()


def local_today(now: Optional[datetime] = None) -> date:
    """Current calendar date in the configured timezone."""
    return get_local_now(now).date()


def start_of_day(dt: datetime) -> datetime:
    return ensure_utc(dt).replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    return ensure_utc(dt).replace(hour=23, minute=59, second=59, microsecond=999999)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end (negative if end is earlier)."""
    seconds = (ensure_utc(end) - ensure_utc(start)).total_seconds()
    # int() truncates toward zero
    return int(seconds / 86400)


def is_overdue(deadline: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Check if a deadline has passed.

    Args:
        deadline: Aware or naive (UTC) datetime
        now: Reference time, defaults to the current time

    Returns:
        True if deadline has passed
    """
    if deadline is None:
        return False

    now = ensure_utc(now) if now is not None else utc_now()
    return ensure_utc(deadline) < now
