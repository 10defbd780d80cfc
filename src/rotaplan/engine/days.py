"""Build the ordered day list for a date range.

Each day carries its weekday name, a weekend flag and the hour budget:
- an hour value from a matching existing day (or an explicit mapping) wins,
- otherwise the weekend/weekday default applies,
- every budget is clamped into ``[0, 11]``.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

from .bands import clamp_daily_hours

_WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

DEFAULT_WEEKDAY_HOURS = 4.0
DEFAULT_WEEKEND_HOURS = 6.0


class DateRangeError(ValueError):
    """Raised for an inverted range or a malformed range date."""


def _to_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").date()
    except ValueError as exc:
        raise DateRangeError(f"Invalid date {value!r}: expected YYYY-MM-DD") from exc


def _iter_days(start: date, end: date) -> list[date]:
    days: list[date] = []
    cursor = start
    while cursor <= end:
        days.append(cursor)
        cursor += timedelta(days=1)
    return days


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def default_hours_for(day: date, default_hours: dict[str, float] | None = None) -> float:
    defaults = default_hours or {}
    key, fallback = ("weekend", DEFAULT_WEEKEND_HOURS) if is_weekend(day) else ("weekday", DEFAULT_WEEKDAY_HOURS)
    value = defaults.get(key, fallback)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return fallback


def expand_date_range(
    *,
    start_date: str | date,
    end_date: str | date,
    existing_days: list[dict[str, Any]] | None = None,
    hours_by_date: dict[str, float] | None = None,
    default_hours: dict[str, float] | None = None,
) -> list[dict[str, Any]]:
    """Return one day per calendar date, ascending, start and end inclusive.

    Raises DateRangeError when ``start_date`` is after ``end_date`` or a
    date string is malformed.
    """
    start = _to_date(start_date)
    end = _to_date(end_date)
    if start > end:
        raise DateRangeError(f"start_date {start.isoformat()} is after end_date {end.isoformat()}")

    known_hours: dict[str, Any] = {}
    for existing in existing_days or []:
        if isinstance(existing, dict) and existing.get("date"):
            known_hours[str(existing["date"])] = existing.get("total_hours", 0)
    known_hours.update(hours_by_date or {})

    days: list[dict[str, Any]] = []
    for day in _iter_days(start, end):
        key = day.isoformat()
        raw_hours = known_hours.get(key)
        if raw_hours is None:
            raw_hours = default_hours_for(day, default_hours)
        days.append(
            {
                "date": key,
                "name": _WEEKDAY_NAMES[day.weekday()],
                "is_weekend": is_weekend(day),
                "total_hours": clamp_daily_hours(raw_hours),
                "subjects": [],
            }
        )
    return days
