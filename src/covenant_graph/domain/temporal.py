"""Day-granularity time arithmetic shared by the engine components.

Pure Python + stdlib — ZERO framework imports.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta

SECONDS_PER_DAY = 86400.0


def days_between(start: datetime, end: datetime) -> float:
    """Fractional days from ``start`` to ``end`` (negative if end is earlier)."""
    return (end - start).total_seconds() / SECONDS_PER_DAY


def add_days(moment: datetime, days: float) -> datetime:
    """Shift ``moment`` by a fractional number of days."""
    return moment + timedelta(days=days)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def day_index(moment: datetime) -> int:
    """Whole days since the epoch, rounded half up to the nearest day.

    Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return math.floor(moment.timestamp() / SECONDS_PER_DAY + 0.5)
