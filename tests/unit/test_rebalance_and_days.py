from __future__ import annotations

import pytest

from rotaplan.engine.days import DateRangeError, expand_date_range
from rotaplan.engine.rebalance import (
    filter_min_hours,
    normalize_day_assignments,
    rescale_to_budget,
    resolve_max_subjects,
    resolve_min_hours,
    snap_to_grid,
    truncate_to_max_subjects,
)


def _item(name: str, priority: int, hours: float) -> dict:
    return {"name": name, "priority": priority, "hours": hours}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(3, 3), (3.0, 3), (None, 4), (0, 4), (2.5, 4), ("four", 4), (True, 4), (float("nan"), 4)],
)
def test_resolve_max_subjects_falls_back_to_default(raw, expected) -> None:
    assert resolve_max_subjects({"max_subjects_per_day": raw}) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(1.5, 1.5), (2, 2.0), (None, 0.0), (-1, 0.0), ("1.0h", 0.0), (True, 0.0)],
)
def test_resolve_min_hours_ignores_non_numeric_values(raw, expected) -> None:
    assert resolve_min_hours({"min_hours_to_include": raw}) == expected


def test_truncate_drops_lowest_priority_first_and_keeps_order() -> None:
    items = [_item("Art", 3, 1), _item("Math", 5, 3), _item("Bio", 4, 2), _item("Latin", 1, 1)]
    kept, dropped = truncate_to_max_subjects(items, 2)
    assert [item["name"] for item in kept] == ["Math", "Bio"]
    assert [item["name"] for item in dropped] == ["Art", "Latin"]


def test_rescale_only_when_over_budget() -> None:
    items = [_item("Math", 5, 6.0), _item("Bio", 4, 2.0)]
    assert rescale_to_budget(items, 8.0) is False
    assert rescale_to_budget(items, 4.0) is True
    assert [item["hours"] for item in items] == [3.0, 1.0]


def test_snap_to_grid_preserves_day_total() -> None:
    items = [_item("Math", 5, 1.3), _item("Bio", 4, 1.3), _item("Art", 3, 1.4)]
    assert snap_to_grid(items, 0.5) is True
    assert [item["hours"] for item in items] == [1.5, 1.0, 1.5]
    assert sum(item["hours"] for item in items) == pytest.approx(4.0)


def test_snap_to_grid_leaves_small_entries_alone() -> None:
    items = [_item("Math", 5, 2.7), _item("Art", 3, 0.3)]
    assert snap_to_grid(items, 0.5) is False
    assert [item["hours"] for item in items] == [2.7, 0.3]


def test_filter_min_hours_never_drops_mandatory_tiers() -> None:
    items = [_item("Math", 5, 0.5), _item("Bio", 4, 0.5), _item("Art", 3, 0.5), _item("Music", 2, 1.0)]
    kept, dropped = filter_min_hours(items, 1.0)
    assert [item["name"] for item in kept] == ["Math", "Bio", "Music"]
    assert [item["name"] for item in dropped] == ["Art"]


def test_normalize_reports_each_pass() -> None:
    items = [_item("Math", 5, 3.0), _item("Physics", 5, 3.0), _item("Bio", 4, 2.0), _item("Art", 3, 3.0)]
    result, events = normalize_day_assignments(
        items,
        budget=10.0,
        config={"max_subjects_per_day": 4, "round_to": 0.5, "min_hours_to_include": 1.0},
    )
    assert events["rescaled"] is True
    assert events["truncated"] == []
    assert sum(item["hours"] for item in result) == pytest.approx(10.0)
    assert items[0]["hours"] == 3.0


def test_expand_date_range_applies_weekend_defaults() -> None:
    days = expand_date_range(start_date="2026-01-02", end_date="2026-01-05")
    assert [(day["date"], day["name"], day["is_weekend"], day["total_hours"]) for day in days] == [
        ("2026-01-02", "Friday", False, 4.0),
        ("2026-01-03", "Saturday", True, 6.0),
        ("2026-01-04", "Sunday", True, 6.0),
        ("2026-01-05", "Monday", False, 4.0),
    ]
    assert all(day["subjects"] == [] for day in days)


def test_expand_date_range_prefers_existing_hours_and_clamps() -> None:
    days = expand_date_range(
        start_date="2026-01-02",
        end_date="2026-01-05",
        existing_days=[{"date": "2026-01-03", "total_hours": 0}],
        hours_by_date={"2026-01-05": 15},
        default_hours={"weekday": 2, "weekend": 8},
    )
    assert [day["total_hours"] for day in days] == [2.0, 0.0, 8.0, 11.0]


def test_expand_date_range_raises_date_range_error_for_bad_dates() -> None:
    with pytest.raises(DateRangeError):
        expand_date_range(start_date="2026-01-05", end_date="2026-01-02")
    with pytest.raises(DateRangeError, match="YYYY-MM-DD"):
        expand_date_range(start_date="2026-13-01", end_date="2026-12-31")


def test_expand_date_range_ignores_non_numeric_default_hours() -> None:
    days = expand_date_range(
        start_date="2026-01-09",
        end_date="2026-01-10",
        default_hours={"weekday": "four", "weekend": None},
    )
    assert [day["total_hours"] for day in days] == [4.0, 6.0]
