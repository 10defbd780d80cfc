"""Planning engine runner."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from rotaplan.metrics import collector as metrics_collector
from rotaplan.reporting.decision_trace import DecisionTraceCollector
from rotaplan.reporting.warnings import build_warnings_and_suggestions

from .allocator import total_base_hours
from .days import expand_date_range
from .rotation import RotationState
from .schedule import build_schedule_with_state, group_subjects_by_priority

logger = logging.getLogger(__name__)


def _extract_subjects(payload: dict[str, Any]) -> list[dict[str, Any]]:
    root = payload.get("subjects", {})
    items = root.get("subjects", []) if isinstance(root, dict) else root
    if isinstance(items, list):
        return [item for item in items if isinstance(item, dict)]
    return []


def _extract_config(payload: dict[str, Any]) -> dict[str, Any]:
    for key in ("effective_config", "config"):
        config = payload.get(key)
        if isinstance(config, dict):
            return config
    return {}


def _extract_days(payload: dict[str, Any], config: dict[str, Any]) -> list[dict[str, Any]]:
    """Explicit day list, or the expansion of ``start_date``..``end_date``."""
    root = payload.get("days", {})
    if isinstance(root, list):
        return [item for item in root if isinstance(item, dict)]
    if not isinstance(root, dict):
        return []

    explicit = [item for item in root.get("days", []) if isinstance(item, dict)]
    if root.get("start_date") and root.get("end_date"):
        hours_by_date = root.get("hours_by_date")
        default_hours = config.get("default_hours")
        return expand_date_range(
            start_date=root["start_date"],
            end_date=root["end_date"],
            existing_days=explicit,
            hours_by_date=hours_by_date if isinstance(hours_by_date, dict) else None,
            default_hours=default_hours if isinstance(default_hours, dict) else None,
        )
    return explicit


def _plan_summary(schedule: list[dict[str, Any]], subjects_count: int) -> dict[str, Any]:
    total_hours = 0.0
    study_days = 0
    covered: set[str] = set()
    for day in schedule:
        assignments = day.get("subjects", [])
        day_hours = sum(float(item["hours"]) for item in assignments)
        total_hours += day_hours
        if assignments:
            study_days += 1
        covered.update(str(item["name"]) for item in assignments)

    dates = [str(day["date"]) for day in schedule if day.get("date")]
    return {
        "days_count": len(schedule),
        "start_date": dates[0] if dates else None,
        "end_date": dates[-1] if dates else None,
        "subjects_count": subjects_count,
        "subjects_covered": len(covered),
        "study_days": study_days,
        "total_hours": round(total_hours, 4),
        "average_daily_hours": round(total_hours / study_days, 4) if study_days else 0.0,
    }


def run_planner(payload: dict[str, Any]) -> dict[str, Any]:
    """Run one stateless build, or resume from ``payload["rotation_state"]``.

    The config is expected to be already resolved (``effective_config``);
    a raw ``config`` is used as-is.
    """
    config = _extract_config(payload)
    subjects = _extract_subjects(payload)
    days = _extract_days(payload, config)
    subjects_by_priority = group_subjects_by_priority(subjects)

    rotation_state = None
    raw_state = payload.get("rotation_state")
    if isinstance(raw_state, dict):
        rotation_state = RotationState.from_dict(raw_state, subjects_by_priority)
        logger.info("Resuming from a persisted rotation state")

    logger.info(
        "Planning %d days for %d subjects",
        len(days),
        sum(len(names) for names in subjects_by_priority.values()),
    )

    decision_trace = DecisionTraceCollector(start_timestamp=datetime.now(timezone.utc))
    schedule, final_state = build_schedule_with_state(
        days,
        config,
        subjects,
        rotation_state=rotation_state,
        decision_trace=decision_trace,
    )

    metrics = metrics_collector.collect_metrics(schedule, subjects=subjects)
    warnings, suggestions = build_warnings_and_suggestions(
        subjects=subjects,
        schedule=schedule,
        total_base_hours=total_base_hours(config),
    )
    summary = _plan_summary(schedule, sum(len(names) for names in subjects_by_priority.values()))
    logger.info(
        "Planned %.2f hours over %d study days (%d warnings)",
        summary["total_hours"],
        summary["study_days"],
        len(warnings),
    )

    return {
        "status": "ok",
        "schedule": schedule,
        "plan_summary": summary,
        "metrics": metrics,
        "warnings": warnings,
        "suggestions": suggestions,
        "decision_trace": decision_trace.as_list(),
        "rotation_state": final_state.as_dict(subjects_by_priority),
        "effective_config": config,
    }
