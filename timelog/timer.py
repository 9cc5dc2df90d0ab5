from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from .errors import NegativeDuration, StateFileError, TimerAlreadyRunning, TimerNotRunning
from .models import from_epoch, to_epoch


@dataclass
class ActiveTimer:
    # project and start are set together or not at all
    project: str | None = None
    start: datetime | None = None

    @property
    def running(self) -> bool:
        return self.start is not None

    def start_for(self, project: str, now: datetime) -> None:
        if self.running:
            raise TimerAlreadyRunning(self.project or project)
        self.project = project
        self.start = now

    def stop(self, now: datetime) -> tuple[str, datetime, timedelta]:
        if self.project is None or self.start is None:
            raise TimerNotRunning()
        duration = now - self.start
        if duration < timedelta():
            raise NegativeDuration()
        project, start = self.project, self.start
        self.cancel()
        return project, start, duration

    def cancel(self) -> None:
        self.project = None
        self.start = None

    def resume(self, project: str, start: datetime) -> None:
        if self.running:
            raise TimerAlreadyRunning(self.project or project)
        self.project = project
        self.start = start

    def elapsed(self, now: datetime) -> timedelta:
        if self.start is None:
            return timedelta()
        return max(now - self.start, timedelta())

    def is_running_for(self, project: str) -> bool:
        return self.running and self.project == project

    def to_dict(self) -> dict[str, Any] | None:
        if self.project is None or self.start is None:
            return None
        return {"project": self.project, "start_epoch_seconds": to_epoch(self.start)}

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "ActiveTimer":
        if payload is None:
            return cls()
        project = payload.get("project")
        start = payload.get("start_epoch_seconds")
        if not isinstance(project, str) or start is None:
            raise StateFileError("Timer entry in the state file needs both 'project' and 'start_epoch_seconds'.")
        return cls(project=project, start=from_epoch(start))
