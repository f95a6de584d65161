"""
Date helpers for deadline arithmetic.

Deadlines are calendar dates. The distance to a deadline is counted in whole
calendar days, so any time of day on the day before a deadline is one day
away from it. That is the same as taking the ceiling of the fractional day
distance to the deadline's midnight.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Union

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value

def days_until_deadline(deadline: Union[date, datetime], now: datetime) -> int:
    """Whole calendar days from `now` to `deadline` (negative once it has passed)."""
    return (as_date(deadline) - as_date(now)).days

def horizon_cutoff(now: datetime, horizon_days: int) -> date:
    """Last deadline date that still falls inside the look-ahead window."""
    return as_date(now) + timedelta(days=horizon_days)

def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so stored and computed timestamps compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
