from __future__ import annotations

from rotaplan.normalization import DEFAULT_CONFIG, normalize_subjects, resolve_effective_config
from rotaplan.validation import ValidationReport, validate_domain_inputs, validate_inputs_with_schema, validate_plan_request


def test_plan_request_requires_all_path_fields() -> None:
    errors = validate_plan_request({"config_path": "config.json", "subjects_path": ""})
    assert [(err.code, err.path) for err in errors] == [
        ("invalid_type", "$.subjects_path"),
        ("missing_field", "$.days_path"),
    ]


def test_effective_config_merges_defaults_and_replaces_base_hours() -> None:
    report = ValidationReport()
    config = resolve_effective_config(
        {"base_hours": {"5": 2.5, "4": 2}, "p5_split_thresholds": {"double_max": 5}, "max_subjects_per_day": 3},
        report,
    )
    assert config["base_hours"] == {1: 0.0, 2: 0.0, 3: 0.0, 4: 2.0, 5: 2.5}
    assert config["p5_split_thresholds"] == {"single": 3.0, "double_min": 4.0, "double_max": 5}
    assert config["max_subjects_per_day"] == 3
    assert config["min_hours_to_include"] == DEFAULT_CONFIG["min_hours_to_include"]
    assert report.infos == []


def test_invalid_round_to_is_reset_with_info() -> None:
    report = ValidationReport()
    config = resolve_effective_config({"round_to": 0.3}, report)
    assert config["round_to"] == 0.5
    assert [issue.code for issue in report.infos] == ["INFO_ROUND_TO_RESET"]


def test_default_config_is_not_shared_between_resolutions() -> None:
    first = resolve_effective_config({}, ValidationReport())
    first["base_hours"][5] = 9.0
    first["default_hours"]["weekday"] = 1.0
    second = resolve_effective_config(None, ValidationReport())
    assert second["base_hours"][5] == 3.0
    assert second["default_hours"]["weekday"] == 4.0


def test_domain_validation_aggregates_every_error() -> None:
    raw_config = {
        "base_hours": {"5": 8, "4": 5, "3": -1},
        "min_hours_to_include": 0.25,
        "p5_split_thresholds": {"single": 5, "double_min": 4},
    }
    loaded = {
        "config": raw_config,
        "effective_config": resolve_effective_config(raw_config, ValidationReport()),
        "subjects": {
            "subjects": [
                {"name": "Math", "priority": 5},
                {"name": "Math ", "priority": 4},
                {"name": "  ", "priority": 3},
                {"name": "Art", "priority": 7},
            ]
        },
        "days": {
            "days": [
                {"date": "2026-01-03", "total_hours": 12},
                {"date": "2026-01-02", "total_hours": 4},
                {"date": "2026-01-02", "total_hours": 4},
            ]
        },
    }

    report = validate_domain_inputs(loaded)
    assert report.error_codes() == {
        "NEGATIVE_BASE_HOURS",
        "BASE_HOURS_TOO_HIGH",
        "MIN_HOURS_TOO_LOW",
        "INVALID_P5_SPLIT_THRESHOLDS",
        "DUPLICATE_SUBJECT_NAME",
        "EMPTY_SUBJECT_NAME",
        "INVALID_PRIORITY",
        "NON_ASCENDING_DATES",
        "DUPLICATE_DATE",
    }
    assert [issue.code for issue in report.infos] == ["INFO_CLAMP_DAILY_HOURS_APPLIED"]


def test_domain_validation_rejects_inverted_date_range() -> None:
    report = validate_domain_inputs({"days": {"start_date": "2026-02-10", "end_date": "2026-02-01"}})
    assert report.error_codes() == {"INVALID_DATE_RANGE"}


def test_domain_validation_accepts_default_inputs() -> None:
    loaded = {
        "config": {},
        "effective_config": resolve_effective_config({}, ValidationReport()),
        "subjects": {"subjects": [{"name": "Math", "priority": 5}, {"name": "Old", "priority": 0}]},
        "days": {"start_date": "2026-02-01", "end_date": "2026-02-07"},
    }
    assert validate_domain_inputs(loaded).errors == []


def test_schema_validation_flags_types_keys_and_formats() -> None:
    payloads = {
        "config": {"base_hours": {"6": 1}, "round_to": "half", "extra": True},
        "subjects": {"subjects": [{"name": "Math"}, {"name": "Bio", "priority": "high"}]},
        "days": {"days": [{"date": "2026-13-01", "total_hours": -2}]},
    }
    report = validate_inputs_with_schema(payloads)
    codes = [issue.code for issue in report.errors]
    assert "INVALID_KEY" in codes
    assert "UNKNOWN_FIELD" in codes
    assert codes.count("INVALID_TYPE") == 2
    assert "MISSING_REQUIRED_FIELD" in codes
    assert "INVALID_DATE_FORMAT" in codes
    assert "OUT_OF_RANGE" in codes


def test_normalize_subjects_accepts_list_or_wrapped_payload() -> None:
    wrapped = normalize_subjects({"subjects": [{"name": " Math ", "priority": 5}, "junk"]})
    assert wrapped == [{"name": "Math", "priority": 5}]
    assert normalize_subjects([{"name": "Art", "priority": 3}]) == [{"name": "Art", "priority": 3}]
    assert normalize_subjects(None) == []
