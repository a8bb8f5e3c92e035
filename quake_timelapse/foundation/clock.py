"""Timezone-aware clock utilities.

All timestamps in quake-timelapse MUST be UTC-aware.  This module is the
single source of "now" so tests can monkey-patch it trivially.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def add_months(value: datetime, months: int) -> datetime:
    """Shift *value* by whole calendar months.

    The day is clamped to the length of the target month, so
    ``Jan 31 + 1 month`` lands on the last day of February.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def isoformat_z(value: datetime) -> str:
    """ISO-8601 with millisecond precision and a trailing ``Z``."""
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")
