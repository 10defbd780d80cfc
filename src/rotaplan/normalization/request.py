"""Normalization for incoming payloads."""

from __future__ import annotations

from typing import Any


def normalize_request(payload: dict[str, Any]) -> dict[str, Any]:
    """Return a normalized copy of input request."""
    normalized = dict(payload)
    if "schema_version" not in normalized:
        normalized["schema_version"] = "1.0"
    return normalized


def normalize_subjects(payload: Any) -> list[dict[str, Any]]:
    """Extract subject entries with stripped names; non-objects are dropped."""
    items = payload.get("subjects", []) if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        return []
    subjects: list[dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        subjects.append({**item, "name": str(item.get("name", "")).strip()})
    return subjects
