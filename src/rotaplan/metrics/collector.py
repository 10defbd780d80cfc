"""Schedule summary and fairness metrics."""

from __future__ import annotations

from collections import defaultdict
from statistics import mean, pstdev
from typing import Any

from rotaplan.engine.bands import MAX_DAILY_HOURS


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _available_hours(day: dict[str, Any]) -> float:
    raw = day.get("total_hours", 0)
    if not isinstance(raw, (int, float)) or isinstance(raw, bool):
        return 0.0
    return max(0.0, min(MAX_DAILY_HOURS, float(raw)))


def _longest_gap(flags: list[bool]) -> int:
    """Longest run of ``False`` in a per-day "was scheduled" sequence."""
    longest = 0
    current = 0
    for scheduled in flags:
        if scheduled:
            current = 0
            continue
        current += 1
        longest = max(longest, current)
    return longest


def collect_metrics(schedule: list[dict[str, Any]], subjects: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    """Compute totals, per-subject coverage and gaps for an allocated schedule.

    ``subjects`` (the registry) adds never-scheduled subjects to the
    per-subject maps; priority-0 entries are ignored.
    """
    days = [day for day in schedule if isinstance(day, dict)]

    names: list[str] = []
    for subject in subjects or []:
        name = str(subject.get("name", "")).strip()
        if name and subject.get("priority") != 0 and name not in names:
            names.append(name)

    hours_by_subject: dict[str, float] = defaultdict(float)
    days_by_subject: dict[str, int] = defaultdict(int)
    hours_by_priority: dict[str, float] = defaultdict(float)
    daily_hours: list[float] = []
    available_hours = 0.0

    for day in days:
        assignments = [item for item in day.get("subjects", []) if isinstance(item, dict)]
        available_hours += _available_hours(day)
        day_total = 0.0
        for item in assignments:
            name = str(item["name"])
            hours = float(item["hours"])
            if name not in names:
                names.append(name)
            hours_by_subject[name] += hours
            days_by_subject[name] += 1
            hours_by_priority[str(item.get("priority"))] += hours
            day_total += hours
        if assignments:
            daily_hours.append(day_total)

    total_hours = sum(daily_hours)
    longest_gap_by_subject: dict[str, int] = {}
    for name in names:
        flags = [any(item.get("name") == name for item in day.get("subjects", [])) for day in days]
        longest_gap_by_subject[name] = _longest_gap(flags)

    avg_daily = mean(daily_hours) if daily_hours else 0.0
    cv = (pstdev(daily_hours) / avg_daily) if daily_hours and avg_daily > 0 else 0.0

    return {
        "total_planned_hours": round(total_hours, 4),
        "available_hours": round(available_hours, 4),
        "utilization": round(_clamp01(total_hours / available_hours), 4) if available_hours > 0 else 0.0,
        "study_days": len(daily_hours),
        "days_count": len(days),
        "subjects_covered": sum(1 for name in names if days_by_subject.get(name, 0) > 0),
        "average_daily_hours": round(avg_daily, 4),
        "daily_hours_cv": round(cv, 4),
        "hours_by_subject": {name: round(hours_by_subject.get(name, 0.0), 4) for name in names},
        "days_by_subject": {name: days_by_subject.get(name, 0) for name in names},
        "hours_by_priority": {key: round(value, 4) for key, value in sorted(hours_by_priority.items())},
        "longest_gap_days_by_subject": longest_gap_by_subject,
    }
