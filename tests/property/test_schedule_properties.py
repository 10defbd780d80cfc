from __future__ import annotations

import random
from copy import deepcopy
from datetime import datetime, timezone

from rotaplan.engine.allocator import RULE_MIN_HOURS_DROP
from rotaplan.engine.bands import clamp_daily_hours
from rotaplan.engine.schedule import build_schedule
from rotaplan.normalization import DEFAULT_CONFIG
from rotaplan.reporting.decision_trace import DecisionTraceCollector

_BUDGETS = [-1, 0, 0.5, 1, 2, 3, 3.5, 4, 4.5, 5, 6, 6.5, 7, 7.25, 8, 8.5, 9, 9.75, 10, 11, 12.5]


def _random_case(seed: int) -> tuple[list[dict], dict, list[dict]]:
    rng = random.Random(seed)
    subjects = [
        {"name": f"S{idx}", "priority": rng.choice([0, 1, 2, 3, 4, 5, 5])}
        for idx in range(rng.randint(1, 10))
    ]
    config = deepcopy(DEFAULT_CONFIG)
    config["base_hours"] = {priority: rng.choice([0.0, 0.5, 1.0, 1.5, 2.0, 3.0, 4.0]) for priority in range(1, 6)}
    config["round_to"] = rng.choice([0.25, 0.5, 1.0])
    config["min_hours_to_include"] = rng.choice([0.5, 1.0, 1.5, 3.0])
    config["max_subjects_per_day"] = rng.randint(1, 5)
    days = [
        {"date": f"day-{idx:03d}", "total_hours": rng.choice(_BUDGETS), "subjects": []}
        for idx in range(rng.randint(1, 40))
    ]
    return subjects, config, days


def test_hard_properties_hold_for_random_inputs() -> None:
    for seed in range(200):
        subjects, config, days = _random_case(seed)
        excluded = {s["name"] for s in subjects if s["priority"] == 0}
        trace = DecisionTraceCollector(start_timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc))
        schedule = build_schedule(days, config, subjects, decision_trace=trace)

        assert len(schedule) == len(days)
        for day in schedule:
            names = [item["name"] for item in day["subjects"]]
            assert not excluded.intersection(names), seed
            assert len(names) == len(set(names)), seed
            assert len(names) <= config["max_subjects_per_day"], seed
            assert sum(item["hours"] for item in day["subjects"]) <= clamp_daily_hours(day["total_hours"]) + 1e-6, seed
            assert all(item["hours"] > 0 and 1 <= item["priority"] <= 5 for item in day["subjects"]), seed

        for item in trace.as_list():
            if RULE_MIN_HOURS_DROP in item["applied_rules"]:
                assert item["priority"] in (1, 2, 3), seed


def test_determinism_same_input_same_output() -> None:
    for seed in range(20):
        subjects, config, days = _random_case(seed)
        assert build_schedule(deepcopy(days), config, subjects) == build_schedule(deepcopy(days), config, subjects)


def test_single_p3_subject_never_waits_more_than_three_long_days() -> None:
    rng = random.Random(7)
    for _ in range(30):
        subjects = [{"name": f"P5-{idx}", "priority": 5} for idx in range(rng.randint(0, 3))]
        subjects += [{"name": f"P4-{idx}", "priority": 4} for idx in range(rng.randint(0, 2))]
        subjects.append({"name": "Art", "priority": 3})
        days = [{"date": f"day-{idx:03d}", "total_hours": rng.choice([9, 9.5, 10, 11])} for idx in range(40)]

        schedule = build_schedule(days, deepcopy(DEFAULT_CONFIG), subjects)
        gap = 0
        for day in schedule:
            if any(item["name"] == "Art" for item in day["subjects"]):
                gap = 0
            else:
                gap += 1
            assert gap <= 3


def test_round_robin_is_fair_over_windows() -> None:
    subjects = [{"name": name, "priority": 5} for name in ("Math", "Physics", "Biology")]
    days = [{"date": f"day-{idx:03d}", "total_hours": 4 if idx % 2 else 5} for idx in range(30)]
    schedule = build_schedule(days, deepcopy(DEFAULT_CONFIG), subjects)

    for width in range(6, 31):
        for start in range(0, 31 - width):
            window = schedule[start : start + width]
            counts = [sum(1 for day in window for item in day["subjects"] if item["name"] == s["name"]) for s in subjects]
            assert max(counts) - min(counts) <= 1
