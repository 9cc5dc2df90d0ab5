from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from .errors import (
    HatError,
    InvalidDuration,
    MissingDescription,
    NoTimeLogged,
    TimerNotRunning,
    TimerRunning,
)
from .logging_config import logger
from .models import TimeEntry
from .parsing import fmt_duration, fmt_instant, humanize_duration
from .state import PersistedState
from .store import validate_project_name
from .undo import CREATED, DELETED, EDITED, STARTED, STOPPED, UndoRecord

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Engine:
    MUTATIONS = ("new", "delete", "switch", "on", "off", "edit", "undo")
    QUERIES = ("list", "time", "overview")

    def __init__(self, storage: Any, clock: Clock = utc_now):
        self.storage = storage
        self.clock = clock

    def now(self) -> datetime:
        return self.clock().replace(microsecond=0)

    def load(self) -> PersistedState:
        return PersistedState.from_dict(self.storage.load())

    def apply(self, state: PersistedState, operation: str, *args: Any) -> tuple[PersistedState, str]:
        if operation not in self.MUTATIONS + self.QUERIES:
            raise ValueError(f"Unknown operation '{operation}'")

        work = state.copy()
        handler = getattr(self, f"_{operation}")
        try:
            message = handler(work, *args)
        except HatError as exc:
            logger.debug("%s rejected: %s", operation, exc)
            raise
        return work, message

    def run(self, operation: str, *args: Any) -> str:
        state, message = self.apply(self.load(), operation, *args)
        if operation in self.MUTATIONS:
            self.storage.save(state.to_dict())
        return message

    def new(self, name: str) -> str:
        return self.run("new", name)

    def delete(self, name: str) -> str:
        return self.run("delete", name)

    def switch(self, name: str) -> str:
        return self.run("switch", name)

    def on(self) -> str:
        return self.run("on")

    def off(self, description: str) -> str:
        return self.run("off", description)

    def edit(self, duration: timedelta, description: str | None = None) -> str:
        return self.run("edit", duration, description)

    def undo(self) -> str:
        return self.run("undo")

    def list(self) -> str:
        return self.run("list")

    def time(self) -> str:
        return self.run("time")

    def overview(self) -> str:
        return self.run("overview")

    def _new(self, state: PersistedState, name: str) -> str:
        name = validate_project_name(name)
        if state.timer.running:
            raise TimerRunning(state.timer.project or "", "change hats")
        previous = state.store.create(name)
        state.undo.record(UndoRecord.created(name, previous))
        logger.info("created project %s", name)
        return f"Added project {name}."

    def _delete(self, state: PersistedState, name: str) -> str:
        name = validate_project_name(name)
        state.store.get(name)
        if state.timer.is_running_for(name):
            raise TimerRunning(name, "delete the project")
        snapshot, was_active = state.store.delete(name)
        state.undo.record(UndoRecord.deleted(snapshot, was_active))
        logger.info("deleted project %s (%d entries)", name, len(snapshot.entries))
        return f"Removed project {name}."

    def _switch(self, state: PersistedState, name: str) -> str:
        name = validate_project_name(name)
        state.store.switch(name, state.timer)
        logger.info("switched to project %s", name)
        return f"Selected project {name}."

    def _on(self, state: PersistedState) -> str:
        project = state.store.active()
        now = self.now()
        state.timer.start_for(project, now)
        state.undo.record(UndoRecord.started(project, now))
        logger.info("started timer for %s", project)
        return f"Now tracking time for project {project}."

    def _off(self, state: PersistedState, description: str) -> str:
        state.store.active()
        if not state.timer.running:
            raise TimerNotRunning()
        description = (description or "").strip()
        if not description:
            raise MissingDescription()

        name, start, duration = state.timer.stop(self.now())
        state.store.get(name).entries.append(TimeEntry(duration=duration, description=description, start=start))
        state.undo.record(UndoRecord.stopped(name, start))
        logger.info("logged %s for %s", duration, name)
        return f"Logged {humanize_duration(duration)} for project {name}."

    def _edit(self, state: PersistedState, duration: timedelta, description: str | None = None) -> str:
        project = state.store.current()
        if state.timer.running:
            raise TimerRunning(state.timer.project or project.name, "edit the last entry")
        if duration < timedelta():
            raise InvalidDuration(f"Duration must not be negative (got {duration}).")
        last = project.last_entry
        if last is None:
            raise NoTimeLogged(project.name)

        if description is not None:
            description = description.strip()
            if not description:
                raise MissingDescription()

        previous = TimeEntry(duration=last.duration, description=last.description, start=last.start)
        last.duration = timedelta(seconds=int(duration.total_seconds()))
        if description is not None:
            last.description = description
        state.undo.record(UndoRecord.edited(project.name, previous))
        logger.info("edited last entry of %s: %s -> %s", project.name, previous.duration, last.duration)

        message = (
            f"Modified the last entry from {humanize_duration(previous.duration)} "
            f"to {humanize_duration(last.duration)}"
        )
        if description is not None and description != previous.description:
            message += f" and changed its description to '{description}'"
        return message + "."

    def _undo(self, state: PersistedState) -> str:
        record = state.undo.consume()
        project = record.project

        if record.kind == STARTED:
            elapsed = state.timer.elapsed(self.now())
            state.timer.cancel()
            message = f"Cancelled {humanize_duration(elapsed)} of unlogged time for project {project}."
        elif record.kind == STOPPED:
            target = state.store.get(project)
            if not target.entries:
                raise NoTimeLogged(project)
            removed = target.entries.pop()
            state.timer.resume(project, record.start)
            state.store.active_project = project
            message = (
                f"Removed the last entry ({humanize_duration(removed.duration)}: {removed.description}); "
                f"tracking time for project {project} again."
            )
        elif record.kind == EDITED:
            target = state.store.get(project)
            if not target.entries or record.entry is None:
                raise NoTimeLogged(project)
            target.entries[-1] = record.entry
            message = (
                f"Restored the last entry of project {project} to "
                f"{humanize_duration(record.entry.duration)}: {record.entry.description}."
            )
        elif record.kind == CREATED:
            state.store.remove(project)
            if state.store.active_project is None and record.previous_active in state.store:
                state.store.active_project = record.previous_active
            message = f"Removed newly created project {project}."
        elif record.kind == DELETED and record.snapshot is not None:
            state.store.restore(record.snapshot, record.was_active)
            message = f"Restored project {project} with {len(record.snapshot.entries)} entries."
        else:
            raise ValueError(f"Unknown undo kind '{record.kind}'")

        logger.info("undid %s for %s", record.kind, project)
        return message

    def _list(self, state: PersistedState) -> str:
        if not state.store.projects:
            return "No projects found."

        now = self.now()
        lines = ["Project list:"]
        for name in state.store.names():
            marker = "*" if name == state.store.active_project else " "
            line = f"  {marker} {name} - {fmt_duration(state.store.total(name))}"
            if state.timer.is_running_for(name):
                line += f" (tracking {humanize_duration(state.timer.elapsed(now))})"
            lines.append(line)
        return "\n".join(lines)

    def _time(self, state: PersistedState) -> str:
        project = state.store.current()
        lines = []
        if project.entries:
            lines.append(f"Logged times for {project.name}, totaling {humanize_duration(project.total)}:")
            for item in project.entries:
                started = fmt_instant(item.start) if item.start is not None else "-"
                lines.append(f"  {started:19}  {fmt_duration(item.duration)}  {item.description}")
        else:
            lines.append(f"No logged times for project {project.name}.")

        if state.timer.is_running_for(project.name):
            elapsed = state.timer.elapsed(self.now())
            lines.append(f"Currently tracking {humanize_duration(elapsed)} of unlogged time.")
        return "\n".join(lines)

    def _overview(self, state: PersistedState) -> str:
        sections = [self._list(state)]
        if state.store.active_project is not None:
            sections.append(self._time(state))
        return "\n\n".join(sections)
