"""Decision trace utilities for allocator runtime events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


@dataclass(slots=True)
class DecisionTraceCollector:
    """Collect allocation decisions while days are allocated."""

    start_timestamp: datetime
    _sequence: int = 0
    _items: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.start_timestamp.tzinfo is None:
            self.start_timestamp = self.start_timestamp.replace(tzinfo=timezone.utc)

    def record(
        self,
        *,
        day: str,
        band: str,
        selected_subject: str | None,
        priority: int | None,
        hours: float,
        candidate_subjects: list[str],
        applied_rules: list[str],
        note: str,
    ) -> None:
        self._sequence += 1
        timestamp = self.start_timestamp + timedelta(seconds=self._sequence)
        self._items.append(
            {
                "decision_id": f"d-{self._sequence:06d}",
                "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
                "day": day,
                "band": band,
                "selected_subject": selected_subject,
                "priority": priority,
                "hours": round(float(hours), 6),
                "candidate_subjects": list(candidate_subjects),
                "applied_rules": list(applied_rules),
                "note": note,
            }
        )

    def for_day(self, day: str) -> list[dict[str, Any]]:
        return [item for item in self._items if item["day"] == day]

    def as_list(self) -> list[dict[str, Any]]:
        """Return trace sorted in deterministic chronological order."""
        return sorted(self._items, key=lambda item: (str(item["timestamp"]), str(item["decision_id"])))
