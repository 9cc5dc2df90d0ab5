from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from .errors import StateFileError
from .models import Project
from .store import ProjectStore
from .timer import ActiveTimer
from .undo import UndoContext, UndoRecord


def empty_payload() -> dict[str, Any]:
    return {"projects": {}, "active_project": None, "timer": None, "undo": None}


@dataclass
class PersistedState:
    store: ProjectStore = field(default_factory=ProjectStore)
    timer: ActiveTimer = field(default_factory=ActiveTimer)
    undo: UndoContext = field(default_factory=UndoContext)

    def copy(self) -> "PersistedState":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        pending = self.undo.pending
        return {
            "projects": {name: project.to_dict() for name, project in self.store.projects.items()},
            "active_project": self.store.active_project,
            "timer": self.timer.to_dict(),
            "undo": pending.to_dict() if pending is not None else None,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "PersistedState":
        if not isinstance(payload, dict):
            raise StateFileError("The state file must contain a JSON object.")

        raw_projects = payload.get("projects") or {}
        if not isinstance(raw_projects, dict):
            raise StateFileError("'projects' in the state file must be an object keyed by project name.")

        try:
            projects = {name: Project.from_dict(name, item or {}) for name, item in raw_projects.items()}
            raw_undo = payload.get("undo")
            undo = UndoContext(UndoRecord.from_dict(raw_undo) if raw_undo is not None else None)
            timer = ActiveTimer.from_dict(payload.get("timer"))
        except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as exc:
            raise StateFileError(f"Malformed data in the state file: {exc}") from exc

        active_project = payload.get("active_project")
        if active_project is not None and not isinstance(active_project, str):
            raise StateFileError("'active_project' in the state file must be a project name or null.")

        state = cls(
            store=ProjectStore(projects=projects, active_project=active_project),
            timer=timer,
            undo=undo,
        )
        state.validate()
        return state

    def validate(self) -> None:
        active = self.store.active_project
        if active is not None and active not in self.store:
            raise StateFileError(f"The active project '{active}' does not exist anymore.")

        if self.timer.running:
            if self.timer.project not in self.store:
                raise StateFileError(f"The timer belongs to unknown project '{self.timer.project}'.")
            if self.timer.project != active:
                raise StateFileError(
                    f"The timer belongs to '{self.timer.project}' but the active project is '{active}'."
                )

        for project in self.store.projects.values():
            if any(item.duration < timedelta() for item in project.entries):
                raise StateFileError(f"Project '{project.name}' has an entry with a negative duration.")
