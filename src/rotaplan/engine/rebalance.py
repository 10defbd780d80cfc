"""Post-selection normalization of one day's assignments.

Order of the passes:
1) truncate to ``max_subjects_per_day`` (lowest priority dropped first),
2) proportional rescale when the day is over budget,
3) snap hours to the ``round_to`` grid without changing the day total,
4) drop P1-P3 assignments under ``min_hours_to_include``.

Rule preserved: priority 4 and 5 assignments are never dropped by the
minimum-hours filter.
"""

from __future__ import annotations

import math
from typing import Any

MANDATORY_PRIORITIES = frozenset({4, 5})
VALID_ROUND_TO = (0.25, 0.5, 1.0)
DEFAULT_MAX_SUBJECTS_PER_DAY = 4
_EPS = 1e-9


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def resolve_max_subjects(config: dict[str, Any]) -> int:
    """``max_subjects_per_day`` as a positive int; anything else is the default.

    Integral floats (``3.0``) count as their int value.
    """
    raw = config.get("max_subjects_per_day")
    if _is_number(raw) and float(raw).is_integer() and raw >= 1:
        return int(raw)
    return DEFAULT_MAX_SUBJECTS_PER_DAY


def resolve_min_hours(config: dict[str, Any]) -> float:
    """``min_hours_to_include``; non-numeric or negative values disable the filter."""
    raw = config.get("min_hours_to_include")
    if _is_number(raw) and raw > 0:
        return float(raw)
    return 0.0


def truncate_to_max_subjects(
    assignments: list[dict[str, Any]],
    max_subjects: int,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Keep at most ``max_subjects`` entries, highest priority first.

    Selection order is preserved among the kept entries.
    """
    limit = max(1, int(max_subjects))
    if len(assignments) <= limit:
        return list(assignments), []
    ranked = sorted(range(len(assignments)), key=lambda idx: (-int(assignments[idx]["priority"]), idx))
    keep = set(ranked[:limit])
    kept = [item for idx, item in enumerate(assignments) if idx in keep]
    dropped = [item for idx, item in enumerate(assignments) if idx not in keep]
    return kept, dropped


def rescale_to_budget(assignments: list[dict[str, Any]], budget: float) -> bool:
    """Scale hours down proportionally so they sum to ``budget``.

    Returns True when a rescale happened. Mutates the entries in place.
    """
    total = sum(float(item["hours"]) for item in assignments)
    if total <= budget or total <= 0:
        return False
    factor = budget / total
    for item in assignments:
        item["hours"] = float(item["hours"]) * factor
    return True


def snap_to_grid(assignments: list[dict[str, Any]], step: float) -> bool:
    """Snap hours onto the ``step`` grid while preserving the day total.

    Each entry is floored to the grid, whole steps of the leftover go to
    the entries with the largest remainders, and a sub-step residual goes
    to the first (highest priority) entry. Days holding an entry smaller
    than one step are left untouched. Returns True when any value changed.
    """
    if not assignments or step <= 0:
        return False
    raw = [float(item["hours"]) for item in assignments]
    if min(raw) < step - _EPS:
        return False

    floored = [math.floor(value / step + _EPS) * step for value in raw]
    leftover = sum(raw) - sum(floored)
    order = sorted(range(len(raw)), key=lambda idx: (-(raw[idx] - floored[idx]), idx))
    for idx in order:
        if leftover < step - _EPS:
            break
        floored[idx] += step
        leftover -= step
    if leftover > _EPS:
        floored[0] += leftover

    changed = False
    for item, value in zip(assignments, floored):
        if abs(float(item["hours"]) - value) > _EPS:
            changed = True
        item["hours"] = value
    return changed


def filter_min_hours(
    assignments: list[dict[str, Any]],
    min_hours: float,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Drop P1-P3 entries under ``min_hours``; P4/P5 always stay."""
    kept: list[dict[str, Any]] = []
    dropped: list[dict[str, Any]] = []
    for item in assignments:
        if int(item["priority"]) in MANDATORY_PRIORITIES or float(item["hours"]) >= min_hours:
            kept.append(item)
        else:
            dropped.append(item)
    return kept, dropped


def normalize_day_assignments(
    assignments: list[dict[str, Any]],
    *,
    budget: float,
    config: dict[str, Any],
) -> tuple[list[dict[str, Any]], dict[str, Any]]:
    """Run every normalization pass and report what each one did."""
    working = [dict(item) for item in assignments]

    working, truncated = truncate_to_max_subjects(working, resolve_max_subjects(config))
    rescaled = rescale_to_budget(working, budget)

    step = config.get("round_to")
    snapped = False
    if _is_number(step) and float(step) in VALID_ROUND_TO:
        snapped = snap_to_grid(working, float(step))

    working, below_minimum = filter_min_hours(working, resolve_min_hours(config))

    return working, {
        "truncated": truncated,
        "rescaled": rescaled,
        "snapped": snapped,
        "below_minimum": below_minimum,
    }
