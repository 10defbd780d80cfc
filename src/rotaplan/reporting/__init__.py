"""Decision trace, warnings and the JSON reports written by the CLI."""

from .decision_trace import DecisionTraceCollector
from .warnings import build_warnings_and_suggestions
from .reports import build_error_report, build_error_report_with_validation, build_success_report

__all__ = [
    "DecisionTraceCollector",
    "build_error_report",
    "build_error_report_with_validation",
    "build_success_report",
    "build_warnings_and_suggestions",
]
