from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterator

from bson import ObjectId


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def today_utc() -> date:
    return now_utc().date()


def date_to_utc_midnight(value: date) -> datetime:
    """Convert a calendar date to timezone-aware UTC midnight datetime."""
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def to_date(value: Any) -> date:
    """Coerce a date, datetime or YYYY-MM-DD string to a calendar date.

    Datetimes are truncated to their day (the day granularity every stay uses).
    Raises ValueError on anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"not a date: {value!r}")


def safe_float(v: Any, default: float = 0.0) -> float:
    """float(v), or `default` for non-numeric and non-finite input."""
    if isinstance(v, bool):
        return default
    try:
        out = float(v)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(out):
        return default
    return out


def safe_int(v: Any, default: int = 0) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def round2(value: float) -> float:
    return round(float(value), 2)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Inclusive start, inclusive end (report windows)."""
    cur = start
    while cur <= end:
        yield cur
        cur += timedelta(days=1)


def rolling_days(start: date, day_count: int) -> list[date]:
    return [start + timedelta(days=offset) for offset in range(max(day_count, 0))]


def maybe_object_id(value: Any) -> Any:
    """Return an ObjectId when `value` is a valid ObjectId string, else the value itself."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value

