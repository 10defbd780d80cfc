"""Day allocator.

One call allocates one day:
1) day-start bookkeeping (every tracked counter +1, even on empty days),
2) band recipe selection with per-tier round-robin,
3) overdue forcing or tier rotation for the P3/P2/P1 slot (9-11 h band),
4) normalization (truncate, rescale, grid snap, minimum-hours filter).

The input rotation state is never mutated; the updated state is returned.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .bands import (
    BAND_FULL_ROTATION,
    BAND_NONE,
    BAND_P5_BASE_PAIR,
    BAND_P5_EQUAL_SPLIT,
    BAND_P5_PLUS_P4,
    BAND_RULES,
    BAND_SINGLE_P5,
    band_for_hours,
    clamp_daily_hours,
)
from .rebalance import normalize_day_assignments, resolve_max_subjects
from .rotation import TRACKED_PRIORITIES, RotationState, find_most_overdue

if TYPE_CHECKING:
    from rotaplan.reporting.decision_trace import DecisionTraceCollector

logger = logging.getLogger(__name__)

RULE_ROUND_ROBIN = "RULE_ROUND_ROBIN"
RULE_OVERDUE_FORCE = "RULE_OVERDUE_FORCE"
RULE_TIER_ROTATION = "RULE_TIER_ROTATION"
RULE_TIER_ROTATION_EMPTY = "RULE_TIER_ROTATION_EMPTY"
RULE_MAX_SUBJECTS_TRUNCATE = "RULE_MAX_SUBJECTS_TRUNCATE"
RULE_CAP_RESCALE = "RULE_CAP_RESCALE"
RULE_GRID_SNAP = "RULE_GRID_SNAP"
RULE_MIN_HOURS_DROP = "RULE_MIN_HOURS_DROP"


def base_hours_for(config: dict[str, Any], priority: int) -> float:
    """Base hours of a tier; missing or malformed entries count as 0."""
    raw = config.get("base_hours")
    if not isinstance(raw, dict):
        return 0.0
    value = raw.get(priority, raw.get(str(priority)))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return max(0.0, float(value))
    return 0.0


def total_base_hours(config: dict[str, Any]) -> float:
    """Sum of base hours over the included priorities (default: all of 1..5)."""
    included = config.get("included_priorities")
    if not isinstance(included, list):
        included = [1, 2, 3, 4, 5]
    return sum(base_hours_for(config, priority) for priority in included if isinstance(priority, int))


class _DayDraft:
    """Mutable selection for the day being allocated."""

    def __init__(
        self,
        *,
        day_label: str,
        band: str,
        subjects_by_priority: dict[int, list[str]],
        state: RotationState,
        decision_trace: DecisionTraceCollector | None,
    ) -> None:
        self.day_label = day_label
        self.band = band
        self.subjects_by_priority = subjects_by_priority
        self.state = state
        self.decision_trace = decision_trace
        self.selected: list[dict[str, Any]] = []

    def used_hours(self) -> float:
        return sum(float(item["hours"]) for item in self.selected)

    def add(self, *, priority: int, index: int, hours: float, rules: list[str], note: str) -> bool:
        subjects = self.subjects_by_priority.get(priority, [])
        name = subjects[index]
        if any(item["name"] == name for item in self.selected):
            return False
        self.selected.append({"name": name, "priority": priority, "hours": float(hours)})
        if priority in TRACKED_PRIORITIES:
            self.state.mark_scheduled(priority, index)
        logger.debug("%s: P%d %s -> %.2fh (%s)", self.day_label, priority, name, hours, ", ".join(rules))
        if self.decision_trace is not None:
            self.decision_trace.record(
                day=self.day_label,
                band=self.band,
                selected_subject=name,
                priority=priority,
                hours=float(hours),
                candidate_subjects=list(subjects),
                applied_rules=[BAND_RULES[self.band], *rules],
                note=note,
            )
        return True

    def take_round_robin(self, priority: int, hours: float) -> bool:
        """Pick the next subject of a tier; empty tiers and empty slots are skipped."""
        subjects = self.subjects_by_priority.get(priority, [])
        if not subjects or hours <= 0:
            return False
        index = self.state.cursor_index(priority, len(subjects))
        added = self.add(
            priority=priority,
            index=index,
            hours=hours,
            rules=[RULE_ROUND_ROBIN],
            note=f"Round-robin pick for tier P{priority}.",
        )
        self.state.advance_cursor(priority)
        return added

    def take_p5_pair(self, hours_each: float) -> None:
        self.take_round_robin(5, hours_each)
        if len(self.subjects_by_priority.get(5, [])) > 1:
            self.take_round_robin(5, hours_each)

    def fill_lower_tier_slot(self, hours: float) -> None:
        """Fill the P3/P2/P1 slot: most overdue subject first, else tier rotation."""
        if hours <= 0:
            return
        overdue = find_most_overdue(self.state, self.subjects_by_priority)
        if overdue is not None:
            priority, index, days = overdue
            self.add(
                priority=priority,
                index=index,
                hours=hours,
                rules=[RULE_OVERDUE_FORCE],
                note=f"Forced: {days} days since last scheduled.",
            )
            self.state.move_cursor_past(priority, index, len(self.subjects_by_priority[priority]))
            return

        tier = self.state.next_rotation_tier()
        subjects = self.subjects_by_priority.get(tier, [])
        if not subjects:
            logger.debug("%s: rotation tier P%d has no subjects", self.day_label, tier)
            if self.decision_trace is not None:
                self.decision_trace.record(
                    day=self.day_label,
                    band=self.band,
                    selected_subject=None,
                    priority=tier,
                    hours=0.0,
                    candidate_subjects=[],
                    applied_rules=[BAND_RULES[self.band], RULE_TIER_ROTATION_EMPTY],
                    note=f"Rotation turn of tier P{tier} skipped: tier is empty.",
                )
            return
        index = self.state.cursor_index(tier, len(subjects))
        if self.add(
            priority=tier,
            index=index,
            hours=hours,
            rules=[RULE_TIER_ROTATION],
            note=f"No overdue subject; rotation turn of tier P{tier}.",
        ):
            self.state.advance_cursor(tier)


def _select(
    draft: _DayDraft,
    *,
    budget: float,
    config: dict[str, Any],
    max_subjects: int,
) -> None:
    p5_count = len(draft.subjects_by_priority.get(5, []))
    base_p5 = base_hours_for(config, 5)
    band = draft.band

    if band == BAND_SINGLE_P5:
        draft.take_round_robin(5, budget)
    elif band == BAND_P5_EQUAL_SPLIT:
        if p5_count > 1:
            draft.take_p5_pair(budget / 2)
        else:
            draft.take_round_robin(5, budget)
    elif band == BAND_P5_BASE_PAIR:
        if p5_count > 1:
            draft.take_p5_pair(base_p5)
        else:
            draft.take_round_robin(5, budget)
    elif band == BAND_P5_PLUS_P4:
        draft.take_p5_pair(base_p5)
        if len(draft.selected) < max_subjects:
            draft.take_round_robin(4, budget - draft.used_hours())
    elif band == BAND_FULL_ROTATION:
        draft.take_p5_pair(base_p5)
        if len(draft.selected) < max_subjects:
            draft.take_round_robin(4, base_hours_for(config, 4))
        if len(draft.selected) < max_subjects:
            draft.fill_lower_tier_slot(budget - draft.used_hours())


def allocate_day(
    budget_hours: float,
    config: dict[str, Any],
    subjects_by_priority: dict[int, list[str]],
    rotation_state: RotationState,
    *,
    day_label: str = "",
    decision_trace: DecisionTraceCollector | None = None,
) -> tuple[list[dict[str, Any]], RotationState]:
    """Allocate one day and return ``(assignments, updated_rotation_state)``."""
    assert not subjects_by_priority.get(0), "priority-0 subjects must be filtered at registry ingestion"

    state = rotation_state.copy()
    state.tick()

    budget = clamp_daily_hours(budget_hours)
    band = band_for_hours(budget, config)
    logger.debug("%s: %.2fh available, band %s", day_label, budget, band)
    if band == BAND_NONE:
        return [], state

    draft = _DayDraft(
        day_label=day_label,
        band=band,
        subjects_by_priority=subjects_by_priority,
        state=state,
        decision_trace=decision_trace,
    )
    _select(draft, budget=budget, config=config, max_subjects=resolve_max_subjects(config))

    assignments, events = normalize_day_assignments(draft.selected, budget=budget, config=config)
    _trace_normalization(draft, events)
    logger.debug(
        "%s: final %s",
        day_label,
        ", ".join(f"{item['name']} (P{item['priority']}, {item['hours']:.2f}h)" for item in assignments) or "-",
    )
    return assignments, state


def _trace_normalization(draft: _DayDraft, events: dict[str, Any]) -> None:
    if draft.decision_trace is None:
        return
    for item in events["truncated"]:
        draft.decision_trace.record(
            day=draft.day_label,
            band=draft.band,
            selected_subject=str(item["name"]),
            priority=int(item["priority"]),
            hours=0.0,
            candidate_subjects=[],
            applied_rules=[RULE_MAX_SUBJECTS_TRUNCATE],
            note="Dropped: over max_subjects_per_day.",
        )
    if events["rescaled"]:
        draft.decision_trace.record(
            day=draft.day_label,
            band=draft.band,
            selected_subject=None,
            priority=None,
            hours=0.0,
            candidate_subjects=[],
            applied_rules=[RULE_CAP_RESCALE],
            note="Hours scaled down proportionally to the daily budget.",
        )
    if events["snapped"]:
        draft.decision_trace.record(
            day=draft.day_label,
            band=draft.band,
            selected_subject=None,
            priority=None,
            hours=0.0,
            candidate_subjects=[],
            applied_rules=[RULE_GRID_SNAP],
            note="Hours snapped to the round_to grid.",
        )
    for item in events["below_minimum"]:
        draft.decision_trace.record(
            day=draft.day_label,
            band=draft.band,
            selected_subject=str(item["name"]),
            priority=int(item["priority"]),
            hours=float(item["hours"]),
            candidate_subjects=[],
            applied_rules=[RULE_MIN_HOURS_DROP],
            note="Dropped: under min_hours_to_include.",
        )
