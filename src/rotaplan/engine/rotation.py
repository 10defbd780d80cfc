"""Rotation state carried from day to day across one schedule build."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ALL_PRIORITIES: tuple[int, ...] = (5, 4, 3, 2, 1)
# Scan order for overdue forcing and for the combined tier rotation.
TRACKED_PRIORITIES: tuple[int, ...] = (3, 2, 1)

OVERDUE_THRESHOLD_DAYS: dict[int, int] = {3: 3, 2: 5, 1: 5}
# Negative start values delay the first forcing: day 4 for P3, day 9 for P2/P1.
INITIAL_DAYS_SINCE: dict[int, int] = {3: -1, 2: -4, 1: -4}


@dataclass(slots=True)
class RotationState:
    """Per-tier elapsed-day counters plus round-robin cursors.

    ``days_since[p][i]`` is parallel to ``subjects_by_priority[p]`` for the
    tracked tiers 3, 2 and 1. ``cursors`` holds one round-robin index per
    tier (1..5) and ``tier_rotation_cursor`` cycles through tiers 3, 2, 1.
    """

    days_since: dict[int, list[int]] = field(default_factory=dict)
    cursors: dict[int, int] = field(default_factory=dict)
    tier_rotation_cursor: int = 0

    def copy(self) -> "RotationState":
        return RotationState(
            days_since={priority: list(values) for priority, values in self.days_since.items()},
            cursors=dict(self.cursors),
            tier_rotation_cursor=self.tier_rotation_cursor,
        )

    def tick(self) -> None:
        """Count one more elapsed day for every tracked subject."""
        for priority, values in self.days_since.items():
            self.days_since[priority] = [value + 1 for value in values]

    def cursor_index(self, priority: int, tier_size: int) -> int:
        return self.cursors.get(priority, 0) % tier_size

    def advance_cursor(self, priority: int) -> None:
        self.cursors[priority] = self.cursors.get(priority, 0) + 1

    def move_cursor_past(self, priority: int, index: int, tier_size: int) -> None:
        self.cursors[priority] = (index + 1) % tier_size

    def mark_scheduled(self, priority: int, index: int) -> None:
        values = self.days_since.get(priority)
        if values is not None and 0 <= index < len(values):
            values[index] = 0

    def next_rotation_tier(self) -> int:
        """Return the tier due in the combined 3 -> 2 -> 1 rotation and advance."""
        tier = TRACKED_PRIORITIES[self.tier_rotation_cursor % len(TRACKED_PRIORITIES)]
        self.tier_rotation_cursor += 1
        return tier

    def as_dict(self, subjects_by_priority: dict[int, list[str]]) -> dict[str, Any]:
        """Serialize keyed by subject name so a changed registry can be re-aligned."""
        days_since: dict[str, dict[str, int]] = {}
        for priority in TRACKED_PRIORITIES:
            names = subjects_by_priority.get(priority, [])
            values = self.days_since.get(priority, [])
            days_since[str(priority)] = {name: int(value) for name, value in zip(names, values)}
        return {
            "days_since_last_scheduled": days_since,
            "cursors": {str(priority): int(self.cursors.get(priority, 0)) for priority in ALL_PRIORITIES},
            "tier_rotation_cursor": int(self.tier_rotation_cursor),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any], subjects_by_priority: dict[int, list[str]]) -> "RotationState":
        """Restore a state; subjects unknown to the payload get initial counters."""
        state = init_rotation_state(subjects_by_priority)
        raw_days = payload.get("days_since_last_scheduled", {})
        if isinstance(raw_days, dict):
            for priority in TRACKED_PRIORITIES:
                by_name = raw_days.get(str(priority), {})
                if not isinstance(by_name, dict):
                    continue
                for index, name in enumerate(subjects_by_priority.get(priority, [])):
                    value = by_name.get(name)
                    if isinstance(value, int) and not isinstance(value, bool):
                        state.days_since[priority][index] = value
        raw_cursors = payload.get("cursors", {})
        if isinstance(raw_cursors, dict):
            for priority in ALL_PRIORITIES:
                value = raw_cursors.get(str(priority))
                if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                    state.cursors[priority] = value
        raw_rotation = payload.get("tier_rotation_cursor")
        if isinstance(raw_rotation, int) and not isinstance(raw_rotation, bool) and raw_rotation >= 0:
            state.tier_rotation_cursor = raw_rotation
        return state


def init_rotation_state(subjects_by_priority: dict[int, list[str]]) -> RotationState:
    """Fresh state for one build: negative-biased counters, zeroed cursors."""
    return RotationState(
        days_since={
            priority: [INITIAL_DAYS_SINCE[priority]] * len(subjects_by_priority.get(priority, []))
            for priority in TRACKED_PRIORITIES
        },
        cursors={priority: 0 for priority in ALL_PRIORITIES},
        tier_rotation_cursor=0,
    )


def find_most_overdue(
    state: RotationState,
    subjects_by_priority: dict[int, list[str]],
) -> tuple[int, int, int] | None:
    """Return ``(priority, index, days_since)`` of the most overdue subject.

    Tiers are scanned 3, 2, 1 and each tier from its cursor onwards; only a
    strictly larger counter replaces the current best, so ties go to the
    higher tier and then to scan order.
    """
    best: tuple[int, int, int] | None = None
    for priority in TRACKED_PRIORITIES:
        subjects = subjects_by_priority.get(priority, [])
        if not subjects:
            continue
        values = state.days_since.get(priority, [])
        threshold = OVERDUE_THRESHOLD_DAYS[priority]
        start = state.cursor_index(priority, len(subjects))
        for attempt in range(len(subjects)):
            index = (start + attempt) % len(subjects)
            days = values[index] if index < len(values) else INITIAL_DAYS_SINCE[priority]
            if days < threshold:
                continue
            if best is None or days > best[2]:
                best = (priority, index, days)
    return best
