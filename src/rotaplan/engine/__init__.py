"""Planning engine."""

from .allocator import allocate_day, total_base_hours
from .bands import band_for_hours, clamp_daily_hours
from .days import DateRangeError, expand_date_range
from .rotation import RotationState, find_most_overdue, init_rotation_state
from .runner import run_planner
from .schedule import build_schedule, build_schedule_with_state, group_subjects_by_priority

__all__ = [
    "DateRangeError",
    "RotationState",
    "allocate_day",
    "band_for_hours",
    "build_schedule",
    "build_schedule_with_state",
    "clamp_daily_hours",
    "expand_date_range",
    "find_most_overdue",
    "group_subjects_by_priority",
    "init_rotation_state",
    "run_planner",
    "total_base_hours",
]
