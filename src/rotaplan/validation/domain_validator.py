"""Domain-level cross-file validation rules."""

from __future__ import annotations

from datetime import date
from typing import Any

from rotaplan.engine.allocator import total_base_hours
from rotaplan.engine.bands import DEFAULT_P5_SPLIT_THRESHOLDS, MAX_DAILY_HOURS, P5_PLUS_P4_MIN_HOURS

from .errors import ValidationReport

MAX_TOTAL_BASE_HOURS = 12.0
MIN_HOURS_TO_INCLUDE_FLOOR = 0.5
VALID_PRIORITIES = frozenset({0, 1, 2, 3, 4, 5})


def validate_domain_inputs(loaded_payload: dict[str, Any]) -> ValidationReport:
    """Validate cross-file coherence and non-schema rules."""
    report = ValidationReport()

    raw_config = loaded_payload.get("config", {})
    effective_config = loaded_payload.get("effective_config", raw_config)
    subjects_payload = loaded_payload.get("subjects", {})
    days_payload = loaded_payload.get("days", {})

    if isinstance(raw_config, dict):
        _validate_config(raw_config, effective_config if isinstance(effective_config, dict) else {}, report)

    subjects = subjects_payload.get("subjects", []) if isinstance(subjects_payload, dict) else []
    if isinstance(subjects, list):
        _validate_subjects(subjects, report)

    if isinstance(days_payload, dict):
        _validate_days(days_payload, report)

    return report


def _validate_config(raw_config: dict[str, Any], effective_config: dict[str, Any], report: ValidationReport) -> None:
    base_hours = raw_config.get("base_hours")
    if isinstance(base_hours, dict):
        for key, value in base_hours.items():
            if _is_number(value) and value < 0:
                report.add_error(
                    code="NEGATIVE_BASE_HOURS",
                    message=f"base_hours for priority {key} must be >= 0",
                    field_path=f"$.config.base_hours.{key}",
                )

    total = total_base_hours(effective_config)
    if total > MAX_TOTAL_BASE_HOURS:
        report.add_error(
            code="BASE_HOURS_TOO_HIGH",
            message=f"Total base hours {total:g} exceed {MAX_TOTAL_BASE_HOURS:g}",
            field_path="$.config.base_hours",
            suggested_fix="Lower the base hours of some priorities.",
            extra={"total_base_hours": total},
        )

    min_hours = raw_config.get("min_hours_to_include")
    if _is_number(min_hours) and min_hours < MIN_HOURS_TO_INCLUDE_FLOOR:
        report.add_error(
            code="MIN_HOURS_TOO_LOW",
            message=f"min_hours_to_include must be >= {MIN_HOURS_TO_INCLUDE_FLOOR}",
            field_path="$.config.min_hours_to_include",
        )

    raw_thresholds = raw_config.get("p5_split_thresholds")
    if isinstance(raw_thresholds, dict):
        merged = {**DEFAULT_P5_SPLIT_THRESHOLDS, **{k: v for k, v in raw_thresholds.items() if _is_number(v)}}
        single = float(merged["single"])
        double_min = float(merged["double_min"])
        double_max = float(merged["double_max"])
        if not (single < double_min <= double_max <= P5_PLUS_P4_MIN_HOURS):
            report.add_error(
                code="INVALID_P5_SPLIT_THRESHOLDS",
                message=(
                    "p5_split_thresholds must satisfy "
                    f"single < double_min <= double_max <= {P5_PLUS_P4_MIN_HOURS:g}"
                ),
                field_path="$.config.p5_split_thresholds",
                extra={"single": single, "double_min": double_min, "double_max": double_max},
            )


def _validate_subjects(subjects: list[Any], report: ValidationReport) -> None:
    names: set[str] = set()
    for idx, subject in enumerate(subjects):
        if not isinstance(subject, dict):
            continue
        path = f"$.subjects.subjects[{idx}]"

        raw_name = subject.get("name")
        if isinstance(raw_name, str):
            name = raw_name.strip()
            if not name:
                report.add_error(
                    code="EMPTY_SUBJECT_NAME",
                    message="Subject name cannot be empty",
                    field_path=f"{path}.name",
                )
            elif name in names:
                report.add_error(
                    code="DUPLICATE_SUBJECT_NAME",
                    message=f"Duplicate subject name: {name}",
                    field_path=f"{path}.name",
                    suggested_fix="Rename or merge the duplicated subject.",
                )
            else:
                names.add(name)

        priority = subject.get("priority")
        if isinstance(priority, int) and not isinstance(priority, bool) and priority not in VALID_PRIORITIES:
            report.add_error(
                code="INVALID_PRIORITY",
                message=f"Priority must be within 0..5, got {priority}",
                field_path=f"{path}.priority",
            )


def _validate_days(days_payload: dict[str, Any], report: ValidationReport) -> None:
    start = _parse_date(days_payload.get("start_date"))
    end = _parse_date(days_payload.get("end_date"))
    if start and end and start > end:
        report.add_error(
            code="INVALID_DATE_RANGE",
            message="start_date must be <= end_date",
            field_path="$.days",
            suggested_fix="Swap the dates or adjust the range.",
        )

    days = days_payload.get("days", [])
    if not isinstance(days, list):
        return

    seen: set[date] = set()
    previous: date | None = None
    for idx, day in enumerate(days):
        if not isinstance(day, dict):
            continue
        path = f"$.days.days[{idx}]"
        current = _parse_date(day.get("date"))
        if current is not None:
            if current in seen:
                report.add_error(
                    code="DUPLICATE_DATE",
                    message=f"Duplicate date: {current.isoformat()}",
                    field_path=f"{path}.date",
                )
            elif previous is not None and current < previous:
                report.add_error(
                    code="NON_ASCENDING_DATES",
                    message="Days must be listed in ascending date order",
                    field_path=f"{path}.date",
                )
            seen.add(current)
            previous = current if previous is None or current > previous else previous

        _clamp_info(day.get("total_hours"), f"{path}.total_hours", report)

    hours_by_date = days_payload.get("hours_by_date")
    if isinstance(hours_by_date, dict):
        for key, value in hours_by_date.items():
            _clamp_info(value, f"$.days.hours_by_date.{key}", report)


def _clamp_info(hours: Any, path: str, report: ValidationReport) -> None:
    if _is_number(hours) and hours > MAX_DAILY_HOURS:
        report.add_info(
            code="INFO_CLAMP_DAILY_HOURS_APPLIED",
            message=f"Daily hours above {MAX_DAILY_HOURS:g} are clamped",
            field_path=path,
            extra={"applied_value": MAX_DAILY_HOURS},
        )


def _parse_date(raw: Any) -> date | None:
    if not isinstance(raw, str):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
