"""Daily hour bands.

A day's budget is bucketed into a fixed band, and each band maps to one
allocation recipe. The bands are discontinuous on purpose: a 6 hour day
is allocated differently from both a 5 hour and a 7 hour day.

Lower edges (default thresholds ``single=3, double_min=4, double_max=6``):

- ``[1, double_min)``          -> one P5 subject takes every hour
- ``[double_min, double_max)`` -> two P5 subjects, equal split
- ``[double_max, 7)``          -> two P5 subjects at base hours
- ``[7, 9)``                   -> two P5 at base + one P4 on the remainder
- ``[9, 11]``                  -> two P5 + one P4 at base + one P3/P2/P1 slot

A budget between two bands (e.g. 8.5 h) uses the nearest lower band; under
1 h nothing is allocated.
"""

from __future__ import annotations

from typing import Any

MAX_DAILY_HOURS = 11.0

BAND_NONE = "none"
BAND_SINGLE_P5 = "single_p5"
BAND_P5_EQUAL_SPLIT = "p5_equal_split"
BAND_P5_BASE_PAIR = "p5_base_pair"
BAND_P5_PLUS_P4 = "p5_plus_p4"
BAND_FULL_ROTATION = "full_rotation"

SINGLE_P5_MIN_HOURS = 1.0
P5_PLUS_P4_MIN_HOURS = 7.0
FULL_ROTATION_MIN_HOURS = 9.0

DEFAULT_P5_SPLIT_THRESHOLDS: dict[str, float] = {
    "single": 3.0,
    "double_min": 4.0,
    "double_max": 6.0,
}

BAND_RULES: dict[str, str] = {
    BAND_NONE: "RULE_BAND_NONE",
    BAND_SINGLE_P5: "RULE_BAND_SINGLE_P5",
    BAND_P5_EQUAL_SPLIT: "RULE_BAND_P5_EQUAL_SPLIT",
    BAND_P5_BASE_PAIR: "RULE_BAND_P5_BASE_PAIR",
    BAND_P5_PLUS_P4: "RULE_BAND_P5_PLUS_P4",
    BAND_FULL_ROTATION: "RULE_BAND_FULL_ROTATION",
}


def clamp_daily_hours(hours: Any) -> float:
    """Clamp a raw day budget into ``[0, MAX_DAILY_HOURS]``."""
    try:
        value = float(hours)
    except (TypeError, ValueError):
        return 0.0
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(MAX_DAILY_HOURS, value))


def resolve_split_thresholds(config: dict[str, Any] | None) -> dict[str, float]:
    """Return P5 split thresholds with defaults for missing or broken values."""
    raw = (config or {}).get("p5_split_thresholds")
    thresholds = dict(DEFAULT_P5_SPLIT_THRESHOLDS)
    if isinstance(raw, dict):
        for key in thresholds:
            value = raw.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                thresholds[key] = float(value)
    # Keep the band edges ordered even for an unvalidated config.
    if thresholds["double_max"] < thresholds["double_min"]:
        thresholds["double_max"] = thresholds["double_min"]
    if thresholds["double_max"] > P5_PLUS_P4_MIN_HOURS:
        thresholds["double_max"] = P5_PLUS_P4_MIN_HOURS
    if thresholds["double_min"] > thresholds["double_max"]:
        thresholds["double_min"] = thresholds["double_max"]
    return thresholds


def band_edges(config: dict[str, Any] | None = None) -> list[tuple[float, str]]:
    """Return ``(lower_edge, band)`` pairs sorted from the highest edge down."""
    thresholds = resolve_split_thresholds(config)
    return [
        (FULL_ROTATION_MIN_HOURS, BAND_FULL_ROTATION),
        (P5_PLUS_P4_MIN_HOURS, BAND_P5_PLUS_P4),
        (thresholds["double_max"], BAND_P5_BASE_PAIR),
        (thresholds["double_min"], BAND_P5_EQUAL_SPLIT),
    ]


def band_for_hours(hours: float, config: dict[str, Any] | None = None) -> str:
    """Look up the band of an already clamped day budget."""
    if hours < SINGLE_P5_MIN_HOURS:
        return BAND_NONE
    for lower_edge, band in band_edges(config):
        if hours >= lower_edge:
            return band
    return BAND_SINGLE_P5
