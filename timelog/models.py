from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


def to_epoch(value: datetime) -> int:
    return int(value.timestamp())


def from_epoch(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


@dataclass
class TimeEntry:
    duration: timedelta
    description: str
    start: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "duration_seconds": int(self.duration.total_seconds()),
            "description": self.description,
        }
        if self.start is not None:
            payload["start_epoch_seconds"] = to_epoch(self.start)
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TimeEntry":
        start = payload.get("start_epoch_seconds")
        return cls(
            duration=timedelta(seconds=int(payload["duration_seconds"])),
            description=str(payload.get("description", "")),
            start=from_epoch(start) if start is not None else None,
        )


@dataclass
class Project:
    name: str
    entries: list[TimeEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"entries": [item.to_dict() for item in self.entries]}

    @classmethod
    def from_dict(cls, name: str, payload: dict[str, Any]) -> "Project":
        return cls(name=name, entries=[TimeEntry.from_dict(item) for item in payload.get("entries", [])])

    @property
    def total(self) -> timedelta:
        return sum((item.duration for item in self.entries), timedelta())

    @property
    def last_entry(self) -> TimeEntry | None:
        return self.entries[-1] if self.entries else None
