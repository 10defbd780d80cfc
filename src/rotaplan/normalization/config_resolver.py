"""Resolve the effective allocation configuration from user input."""

from __future__ import annotations

from typing import Any

from rotaplan.engine.bands import DEFAULT_P5_SPLIT_THRESHOLDS
from rotaplan.engine.rebalance import VALID_ROUND_TO
from rotaplan.validation import ValidationReport

DEFAULT_BASE_HOURS: dict[int, float] = {1: 1.0, 2: 1.0, 3: 1.5, 4: 2.0, 5: 3.0}

DEFAULT_CONFIG: dict[str, Any] = {
    "base_hours": dict(DEFAULT_BASE_HOURS),
    "min_hours_to_include": 1.0,
    "round_to": 0.5,
    "included_priorities": [1, 2, 3, 4, 5],
    "max_subjects_per_day": 4,
    "p5_split_thresholds": dict(DEFAULT_P5_SPLIT_THRESHOLDS),
    "default_hours": {"weekday": 4.0, "weekend": 6.0},
}


def resolve_effective_config(source: Any, validation_report: ValidationReport) -> dict[str, Any]:
    """Merge user config over defaults into an engine-ready dict.

    A user-supplied ``base_hours`` mapping replaces the default mapping as a
    whole: tiers it leaves out get 0 hours.
    """
    config = {
        **DEFAULT_CONFIG,
        "base_hours": dict(DEFAULT_BASE_HOURS),
        "p5_split_thresholds": dict(DEFAULT_P5_SPLIT_THRESHOLDS),
        "default_hours": dict(DEFAULT_CONFIG["default_hours"]),
    }
    if not isinstance(source, dict):
        return config

    for key, value in source.items():
        if key in {"base_hours", "p5_split_thresholds", "default_hours", "schema_version"}:
            continue
        config[key] = value

    if isinstance(source.get("base_hours"), dict):
        config["base_hours"] = _resolve_base_hours(source["base_hours"])
    if isinstance(source.get("p5_split_thresholds"), dict):
        config["p5_split_thresholds"].update(source["p5_split_thresholds"])
    if isinstance(source.get("default_hours"), dict):
        config["default_hours"].update(source["default_hours"])

    round_to = config.get("round_to")
    if not _is_number(round_to) or float(round_to) not in VALID_ROUND_TO:
        config["round_to"] = 0.5
        validation_report.add_info(
            code="INFO_ROUND_TO_RESET",
            message=f"round_to {round_to!r} is not one of {list(VALID_ROUND_TO)}; reset to 0.5",
            field_path="$.config.round_to",
            extra={"applied_value": 0.5},
        )
    else:
        config["round_to"] = float(round_to)

    included = config.get("included_priorities")
    if not isinstance(included, list):
        config["included_priorities"] = list(DEFAULT_CONFIG["included_priorities"])

    return config


def _resolve_base_hours(raw: dict[Any, Any]) -> dict[int, float]:
    resolved: dict[int, float] = {priority: 0.0 for priority in DEFAULT_BASE_HOURS}
    for key, value in raw.items():
        try:
            priority = int(key)
        except (TypeError, ValueError):
            continue
        if priority in resolved and _is_number(value):
            resolved[priority] = float(value)
    return resolved


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
