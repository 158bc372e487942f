"""Timezone helpers for calendar-day arithmetic.

Timestamps are stored in UTC. Day boundaries (conflict check, period filters,
busy days) are computed in the configured application timezone.
"""
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple

from tracker.utils.runtime import app_timezone


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC; SQLite hands back naive values."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    value = ensure_aware(value)
    if value is None:
        return None
    return value.astimezone(timezone.utc)


def local_date(value: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of ``value`` in the application timezone."""
    tz = tz or app_timezone()
    return ensure_aware(value).astimezone(tz).date()


def day_bounds(day: date, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """Return ``[start, next_day_start)`` for a local calendar day, in UTC."""
    tz = tz or app_timezone()
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def same_day_bounds(value: datetime, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    tz = tz or app_timezone()
    return day_bounds(local_date(value, tz), tz)


def start_of_day(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    tz = tz or app_timezone()
    start, _end = same_day_bounds(value, tz)
    return start
