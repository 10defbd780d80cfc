"""CLI entrypoint for rotaplan."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

from rotaplan.engine import DateRangeError, run_planner
from rotaplan.io import read_json, resolve_input_path, write_json
from rotaplan.normalization import normalize_request, normalize_subjects, resolve_effective_config
from rotaplan.reporting import (
    build_error_report,
    build_error_report_with_validation,
    build_success_report,
)
from rotaplan.validation import (
    ValidationError,
    ValidationReport,
    validate_domain_inputs,
    validate_inputs_with_schema,
    validate_plan_request,
)

logger = logging.getLogger(__name__)

_INPUT_FILES = {
    "config_path": "config",
    "subjects_path": "subjects",
    "days_path": "days",
}
_OPTIONAL_INPUT_FILES = {
    "rotation_state_path": "rotation_state",
}


def _load_referenced_inputs(request_file: Path, request: dict[str, Any]) -> tuple[dict[str, Any], list[ValidationError]]:
    loaded = dict(request)
    errors: list[ValidationError] = []

    mapping = dict(_INPUT_FILES)
    mapping.update({key: value for key, value in _OPTIONAL_INPUT_FILES.items() if request.get(key)})

    for path_field, target_field in mapping.items():
        resolved = resolve_input_path(request_file, request[path_field])
        try:
            loaded[target_field] = read_json(resolved)
        except FileNotFoundError:
            errors.append(
                ValidationError(
                    code="file_not_found",
                    message=f"Referenced file not found: {resolved}",
                    path=f"$.{path_field}",
                )
            )
        except OSError as exc:
            errors.append(
                ValidationError(
                    code="file_unreadable",
                    message=f"Referenced file cannot be read: {resolved} ({exc.strerror or exc})",
                    path=f"$.{path_field}",
                )
            )
        except ValueError as exc:
            errors.append(
                ValidationError(
                    code="invalid_json",
                    message=str(exc),
                    path=f"$.{path_field}",
                )
            )
        else:
            logger.debug("Loaded %s from %s", target_field, resolved)

    return loaded, errors


def run_plan_command(request_path: str, output_path: str) -> int:
    validation_report = ValidationReport()

    try:
        request_payload = read_json(request_path)
    except (OSError, ValueError) as exc:
        logger.error("Cannot read request %s: %s", request_path, exc)
        error = build_error_report(
            [ValidationError(code="invalid_request", message=str(exc), path="$.request")],
            code="request_read_error",
        )
        write_json(output_path, error)
        return 2

    request_payload = normalize_request(request_payload)
    errors = validate_plan_request(request_payload)

    if errors:
        logger.error("Request has %d invalid fields", len(errors))
        write_json(output_path, build_error_report(errors))
        return 2

    loaded_request, load_errors = _load_referenced_inputs(Path(request_path), request_payload)
    if load_errors:
        logger.error("Could not load %d referenced files", len(load_errors))
        write_json(
            output_path,
            build_error_report_with_validation(
                load_errors,
                validation_report=validation_report,
                code="input_load_error",
            ),
        )
        return 2

    loaded_request["plan_request"] = request_payload
    loaded_request["effective_config"] = resolve_effective_config(loaded_request.get("config"), validation_report)

    validation_report.extend(validate_domain_inputs(loaded_request))
    validation_report.extend(validate_inputs_with_schema(loaded_request))

    if validation_report.errors:
        logger.error("Validation failed: %s", ", ".join(sorted(validation_report.error_codes())))
        write_json(
            output_path,
            build_error_report_with_validation(
                validation_report.as_errors(),
                validation_report=validation_report,
                code="validation_error",
            ),
        )
        return 2

    loaded_request["subjects"] = normalize_subjects(loaded_request["subjects"])
    try:
        result = run_planner(loaded_request)
    except DateRangeError as exc:
        validation_report.add_error(code="INVALID_DATE_RANGE", message=str(exc), field_path="$.days")
        write_json(
            output_path,
            build_error_report_with_validation(
                validation_report.as_errors(),
                validation_report=validation_report,
                code="validation_error",
            ),
        )
        return 2

    write_json(output_path, build_success_report(result, result["metrics"], validation_report))
    logger.info("Plan written to %s", output_path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rotaplan", description="Rotating study-time planner CLI")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser("plan", help="Generate a schedule from plan_request JSON")
    plan_parser.add_argument("--request", required=True, help="Path to plan_request.json")
    plan_parser.add_argument("--output", required=True, help="Path to plan_output.json")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "plan":
        return run_plan_command(args.request, args.output)

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
