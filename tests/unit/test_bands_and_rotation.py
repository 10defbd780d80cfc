from __future__ import annotations

from rotaplan.engine.bands import (
    BAND_FULL_ROTATION,
    BAND_NONE,
    BAND_P5_BASE_PAIR,
    BAND_P5_EQUAL_SPLIT,
    BAND_P5_PLUS_P4,
    BAND_SINGLE_P5,
    band_for_hours,
    clamp_daily_hours,
)
from rotaplan.engine.rotation import RotationState, find_most_overdue, init_rotation_state


def _by_priority(**tiers: list[str]) -> dict[int, list[str]]:
    grouped = {priority: [] for priority in (5, 4, 3, 2, 1)}
    for key, names in tiers.items():
        grouped[int(key[1:])] = names
    return grouped


def test_band_table_lookup_with_default_thresholds() -> None:
    expected = {
        0: BAND_NONE,
        0.5: BAND_NONE,
        0.99: BAND_NONE,
        1: BAND_SINGLE_P5,
        3: BAND_SINGLE_P5,
        3.5: BAND_SINGLE_P5,
        4: BAND_P5_EQUAL_SPLIT,
        5: BAND_P5_EQUAL_SPLIT,
        5.5: BAND_P5_EQUAL_SPLIT,
        6: BAND_P5_BASE_PAIR,
        6.5: BAND_P5_BASE_PAIR,
        7: BAND_P5_PLUS_P4,
        8.5: BAND_P5_PLUS_P4,
        9: BAND_FULL_ROTATION,
        11: BAND_FULL_ROTATION,
    }
    for hours, band in expected.items():
        assert band_for_hours(hours) == band, hours


def test_band_edges_follow_configured_split_thresholds() -> None:
    config = {"p5_split_thresholds": {"single": 4, "double_min": 5, "double_max": 6}}
    assert band_for_hours(4.5, config) == BAND_SINGLE_P5
    assert band_for_hours(5, config) == BAND_P5_EQUAL_SPLIT
    assert band_for_hours(6, config) == BAND_P5_BASE_PAIR


def test_clamp_daily_hours_handles_out_of_range_and_garbage() -> None:
    assert clamp_daily_hours(-3) == 0.0
    assert clamp_daily_hours(14) == 11.0
    assert clamp_daily_hours("x") == 0.0
    assert clamp_daily_hours(None) == 0.0
    assert clamp_daily_hours(float("nan")) == 0.0
    assert clamp_daily_hours("7.5") == 7.5


def test_init_state_uses_negative_biased_counters() -> None:
    state = init_rotation_state(_by_priority(p3=["Art", "History"], p2=["Music"], p1=["Latin"]))
    assert state.days_since == {3: [-1, -1], 2: [-4], 1: [-4]}
    assert state.cursors == {5: 0, 4: 0, 3: 0, 2: 0, 1: 0}
    assert state.tier_rotation_cursor == 0


def test_copy_is_independent_and_tick_increments_every_counter() -> None:
    state = init_rotation_state(_by_priority(p3=["Art"], p1=["Latin"]))
    clone = state.copy()
    clone.tick()
    clone.advance_cursor(5)

    assert state.days_since == {3: [-1], 2: [], 1: [-4]}
    assert clone.days_since == {3: [0], 2: [], 1: [-3]}
    assert state.cursors[5] == 0
    assert clone.cursors[5] == 1


def test_combined_rotation_cycles_three_two_one() -> None:
    state = RotationState()
    assert [state.next_rotation_tier() for _ in range(5)] == [3, 2, 1, 3, 2]


def test_most_overdue_prefers_larger_counter_then_higher_tier() -> None:
    subjects = _by_priority(p3=["Art"], p2=["Music"], p1=["Latin"])
    state = init_rotation_state(subjects)

    state.days_since = {3: [2], 2: [4], 1: [4]}
    assert find_most_overdue(state, subjects) is None

    state.days_since = {3: [5], 2: [5], 1: [5]}
    assert find_most_overdue(state, subjects) == (3, 0, 5)

    state.days_since = {3: [5], 2: [6], 1: [6]}
    assert find_most_overdue(state, subjects) == (2, 0, 6)


def test_most_overdue_scans_tier_from_cursor() -> None:
    subjects = _by_priority(p3=["Art", "History", "Geography"])
    state = init_rotation_state(subjects)
    state.days_since[3] = [4, 4, 4]
    state.cursors[3] = 2
    assert find_most_overdue(state, subjects) == (3, 2, 4)


def test_state_dict_is_keyed_by_name_and_survives_registry_changes() -> None:
    before = _by_priority(p5=["Math"], p3=["Art", "History"])
    state = init_rotation_state(before)
    state.days_since[3] = [2, 0]
    state.cursors[3] = 1
    state.tier_rotation_cursor = 4

    payload = state.as_dict(before)
    assert payload["days_since_last_scheduled"]["3"] == {"Art": 2, "History": 0}

    after = _by_priority(p5=["Math"], p3=["History", "Art", "Drawing"])
    restored = RotationState.from_dict(payload, after)
    assert restored.days_since[3] == [0, 2, -1]
    assert restored.cursors[3] == 1
    assert restored.tier_rotation_cursor == 4
