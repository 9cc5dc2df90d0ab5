from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .errors import NothingToUndo, StateFileError
from .models import Project, TimeEntry, from_epoch, to_epoch

STARTED = "started"
STOPPED = "stopped"
EDITED = "edited"
CREATED = "created"
DELETED = "deleted"
UNDO_KINDS = (STARTED, STOPPED, EDITED, CREATED, DELETED)


@dataclass
class UndoRecord:
    kind: str
    project: str
    start: datetime | None = None
    entry: TimeEntry | None = None
    previous_active: str | None = None
    snapshot: Project | None = None
    was_active: bool = False

    @classmethod
    def started(cls, project: str, start: datetime) -> "UndoRecord":
        return cls(kind=STARTED, project=project, start=start)

    @classmethod
    def stopped(cls, project: str, start: datetime) -> "UndoRecord":
        return cls(kind=STOPPED, project=project, start=start)

    @classmethod
    def edited(cls, project: str, entry: TimeEntry) -> "UndoRecord":
        return cls(kind=EDITED, project=project, entry=entry)

    @classmethod
    def created(cls, project: str, previous_active: str | None) -> "UndoRecord":
        return cls(kind=CREATED, project=project, previous_active=previous_active)

    @classmethod
    def deleted(cls, snapshot: Project, was_active: bool) -> "UndoRecord":
        return cls(kind=DELETED, project=snapshot.name, snapshot=snapshot, was_active=was_active)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind, "project": self.project}
        if self.kind in (STARTED, STOPPED) and self.start is not None:
            payload["start_epoch_seconds"] = to_epoch(self.start)
        elif self.kind == EDITED and self.entry is not None:
            payload["entry"] = self.entry.to_dict()
        elif self.kind == CREATED:
            payload["previous_active"] = self.previous_active
        elif self.kind == DELETED and self.snapshot is not None:
            payload["snapshot"] = self.snapshot.to_dict()
            payload["was_active"] = self.was_active
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "UndoRecord":
        kind = payload.get("kind")
        project = payload.get("project")
        if kind not in UNDO_KINDS or not isinstance(project, str):
            raise StateFileError(f"Unrecognized undo record in the state file: {payload!r}")

        try:
            if kind in (STARTED, STOPPED):
                return cls(kind=kind, project=project, start=from_epoch(payload["start_epoch_seconds"]))
            if kind == EDITED:
                return cls.edited(project, TimeEntry.from_dict(payload["entry"]))
            if kind == CREATED:
                return cls.created(project, payload.get("previous_active"))
            return cls.deleted(Project.from_dict(project, payload["snapshot"]), bool(payload.get("was_active")))
        except (KeyError, TypeError, ValueError) as exc:
            raise StateFileError(f"Incomplete '{kind}' undo record in the state file.") from exc


@dataclass
class UndoContext:
    pending: UndoRecord | None = field(default=None)

    def record(self, record: UndoRecord) -> None:
        self.pending = record

    def consume(self) -> UndoRecord:
        if self.pending is None:
            raise NothingToUndo()
        record, self.pending = self.pending, None
        return record
