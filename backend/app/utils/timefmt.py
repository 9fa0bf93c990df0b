"""
Daylog Backend — Time Formatting and Calendar Days
====================================================

What:  The one place that knows about the display timezone.
How:   Stored instants are timezone-aware UTC. They are converted to the fixed
       display zone (UTC+8 by default) when rendered, and when the calendar
       day of an instant is needed for check-in or diary rules.

Output format: "YYYY-MM-DD HH:mm:ss", e.g. "2024-01-15 20:30:00".
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from app.config import settings

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"


def display_timezone() -> timezone:
    """Fixed-offset zone used for display and calendar-day rules."""
    return timezone(timedelta(hours=settings.display_utc_offset_hours))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    # Naive values are read as wall-clock time in the display zone
    if value.tzinfo is None:
        return value.replace(tzinfo=display_timezone())
    return value


def format_display_time(value: Optional[datetime]) -> Optional[str]:
    """
    Render an instant in the display zone.

    >>> format_display_time(datetime(2024, 1, 15, 12, 30, tzinfo=timezone.utc))
    '2024-01-15 20:30:00'
    """
    if value is None:
        return None
    return _as_aware(value).astimezone(display_timezone()).strftime(DISPLAY_FORMAT)


def calendar_day(value: datetime) -> date:
    """Calendar day of an instant, evaluated in the display zone."""
    return _as_aware(value).astimezone(display_timezone()).date()


def start_of_day(value: Optional[datetime] = None) -> datetime:
    """
    Midnight (display zone) of the calendar day containing `value`.

    Used as the per-day uniqueness key for diary entries. Defaults to now.
    """
    local = _as_aware(value or utcnow()).astimezone(display_timezone())
    return local.replace(hour=0, minute=0, second=0, microsecond=0)
