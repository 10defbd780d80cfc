"""Build CLI reports."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from rotaplan.validation.errors import ValidationError, ValidationReport

REPORT_SCHEMA_VERSION = "1.0.0"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def build_error_report(errors: list[ValidationError], code: str = "validation_error") -> dict[str, Any]:
    """Return a JSON-serializable error report."""
    return {
        "status": "error",
        "generated_at": _utc_now(),
        "error": {
            "code": code,
            "count": len(errors),
            "details": [
                {"code": err.code, "message": err.message, "path": err.path}
                for err in errors
            ],
        },
    }


def build_error_report_with_validation(
    errors: list[ValidationError],
    validation_report: ValidationReport,
    code: str = "validation_error",
) -> dict[str, Any]:
    payload = build_error_report(errors, code=code)
    payload["validation_report"] = validation_report.as_dict()
    return payload


def build_success_report(
    result: dict[str, Any], metrics: dict[str, Any], validation_report: ValidationReport
) -> dict[str, Any]:
    """Wrap a runner result into the ``plan_output`` document."""
    generated_at = _utc_now()
    summary = result.get("plan_summary", {})
    span = "-".join(str(summary.get(key) or "").replace("-", "") for key in ("start_date", "end_date"))
    return {
        "status": "ok",
        "plan_output": {
            "schema_version": REPORT_SCHEMA_VERSION,
            "plan_id": f"plan-{span}" if span.strip("-") else "plan",
            "generated_at": generated_at,
            "plan_summary": summary,
            "schedule": result.get("schedule", []),
            "metrics": metrics,
            "warnings": result.get("warnings", []),
            "suggestions": result.get("suggestions", []),
            "decision_trace": result.get("decision_trace", []),
            "rotation_state": result.get("rotation_state", {}),
            "effective_config": result.get("effective_config", {}),
            "validation_report": validation_report.as_dict(),
        },
    }
