"""Warning and suggestion generation for planning output."""

from __future__ import annotations

from typing import Any

BASE_HOURS_BUDGET = 12.0


def _as_name(subject: dict[str, Any]) -> str:
    return str(subject.get("name", "")).strip()


def build_warnings_and_suggestions(
    *,
    subjects: list[dict[str, Any]],
    schedule: list[dict[str, Any]],
    total_base_hours: float = 0.0,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Generate schedule warnings and the suggestions that address them."""
    warnings: list[dict[str, Any]] = []
    suggestions: list[dict[str, Any]] = []

    # (1) Excluded subjects are reported, never scheduled.
    excluded = [_as_name(s) for s in subjects if s.get("priority") == 0 and _as_name(s)]
    if excluded:
        warnings.append(
            {
                "code": "WARN_EXCLUDED_SUBJECTS",
                "severity": "info",
                "message": "Priority-0 subjects are excluded from the schedule.",
                "subjects": excluded,
            }
        )

    # (2) Active subjects that never got a single day.
    scheduled_names = {
        str(item.get("name"))
        for day in schedule
        for item in day.get("subjects", [])
        if isinstance(item, dict)
    }
    never = [
        _as_name(s)
        for s in subjects
        if s.get("priority") in (1, 2, 3, 4, 5) and _as_name(s) and _as_name(s) not in scheduled_names
    ]
    if never and schedule:
        warnings.append(
            {
                "code": "WARN_SUBJECT_NEVER_SCHEDULED",
                "severity": "warning",
                "message": "Some subjects were never scheduled in the selected range.",
                "subjects": never,
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_EXTEND_RANGE_OR_HOURS",
                "message": "Extend the date range or add days with 9 or more hours so the lower tiers rotate in.",
            }
        )

    # (3) Available hours that produced no assignment.
    idle_days = [
        str(day.get("date", f"day-{idx + 1}"))
        for idx, day in enumerate(schedule)
        if _positive(day.get("total_hours")) and not day.get("subjects")
    ]
    if idle_days:
        warnings.append(
            {
                "code": "WARN_DAY_WITHOUT_ASSIGNMENT",
                "severity": "warning",
                "message": "Days with available hours received no assignment.",
                "days": idle_days,
            }
        )

    # (4) Bands below 7 h only draw from priority 5.
    has_p5 = any(s.get("priority") == 5 and _as_name(s) for s in subjects)
    if not has_p5 and any(s.get("priority") in (1, 2, 3, 4) for s in subjects):
        warnings.append(
            {
                "code": "WARN_EMPTY_P5_TIER",
                "severity": "warning",
                "message": "No priority-5 subject: days under 7 hours stay empty.",
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_ADD_P5_SUBJECT",
                "message": "Raise at least one subject to priority 5.",
            }
        )

    # (5) Soft budget on the sum of base hours.
    if total_base_hours > BASE_HOURS_BUDGET:
        warnings.append(
            {
                "code": "WARN_BASE_HOURS_OVER_BUDGET",
                "severity": "warning",
                "message": f"Total base hours exceed {BASE_HOURS_BUDGET:g}; long days will be scaled down.",
                "total_base_hours": round(float(total_base_hours), 4),
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_LOWER_BASE_HOURS",
                "message": "Lower the base hours of some priorities.",
            }
        )

    return warnings, suggestions


def _positive(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0
