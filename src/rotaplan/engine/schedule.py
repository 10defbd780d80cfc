"""Schedule builder: folds the day allocator over an ordered day list."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .allocator import allocate_day
from .bands import clamp_daily_hours
from .rotation import ALL_PRIORITIES, RotationState, init_rotation_state

if TYPE_CHECKING:
    from rotaplan.reporting.decision_trace import DecisionTraceCollector

logger = logging.getLogger(__name__)


def _as_priority(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    return None


def group_subjects_by_priority(subjects: list[dict[str, Any]]) -> dict[int, list[str]]:
    """Group registry entries by tier, keeping registry order.

    This is the only place priority-0 (excluded) subjects are filtered out.
    """
    grouped: dict[int, list[str]] = {priority: [] for priority in ALL_PRIORITIES}
    seen: set[str] = set()
    for subject in subjects:
        if not isinstance(subject, dict):
            continue
        name = str(subject.get("name", "")).strip()
        priority = _as_priority(subject.get("priority"))
        if not name or name in seen:
            continue
        if priority not in grouped:
            if priority != 0:
                logger.warning("Subject %r has unsupported priority %r; ignored", name, subject.get("priority"))
            continue
        seen.add(name)
        grouped[priority].append(name)
    return grouped


def build_schedule_with_state(
    days: list[dict[str, Any]],
    config: dict[str, Any],
    subjects: list[dict[str, Any]],
    *,
    rotation_state: RotationState | None = None,
    decision_trace: DecisionTraceCollector | None = None,
) -> tuple[list[dict[str, Any]], RotationState]:
    """Allocate every day in order and return the days plus the final state.

    Days must be in ascending date order without duplicates; the fold is
    sequential and cannot be split. ``total_hours`` is kept as given and
    clamped into ``[0, 11]`` only for allocation.
    """
    subjects_by_priority = group_subjects_by_priority(subjects)
    state = rotation_state if rotation_state is not None else init_rotation_state(subjects_by_priority)

    scheduled: list[dict[str, Any]] = []
    for idx, day in enumerate(days):
        label = str(day.get("date") or f"day-{idx + 1}")
        budget = clamp_daily_hours(day.get("total_hours", 0))
        assignments, state = allocate_day(
            budget,
            config,
            subjects_by_priority,
            state,
            day_label=label,
            decision_trace=decision_trace,
        )
        scheduled.append({**day, "subjects": assignments})

    logger.debug("Built schedule for %d days", len(scheduled))
    return scheduled, state


def build_schedule(
    days: list[dict[str, Any]],
    config: dict[str, Any],
    subjects: list[dict[str, Any]],
    *,
    decision_trace: DecisionTraceCollector | None = None,
) -> list[dict[str, Any]]:
    """Stateless-per-run schedule build: rotation state starts fresh."""
    scheduled, _ = build_schedule_with_state(days, config, subjects, decision_trace=decision_trace)
    return scheduled
