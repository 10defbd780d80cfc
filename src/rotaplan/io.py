"""JSON file helpers for the rotaplan CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def resolve_input_path(request_file: str | Path, value: str) -> Path:
    """Resolve ``value`` against the directory of the request file."""
    path = Path(value)
    if path.is_absolute():
        return path
    return (Path(request_file).parent / path).resolve()


def read_json(path: str | Path) -> dict[str, Any]:
    """Read a JSON object; a non-object root raises ValueError."""
    with Path(path).open(encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"JSON root must be an object: {path}")
    return payload


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2, sort_keys=True)
        handle.write("\n")
