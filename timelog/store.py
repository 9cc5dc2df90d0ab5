from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from .errors import DuplicateProject, InvalidProjectName, NoActiveProject, TimerRunning, UnknownProject
from .models import Project
from .timer import ActiveTimer


def validate_project_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise InvalidProjectName()
    return name


@dataclass
class ProjectStore:
    projects: dict[str, Project] = field(default_factory=dict)
    active_project: str | None = None

    def __contains__(self, name: str) -> bool:
        return name in self.projects

    def get(self, name: str) -> Project:
        project = self.projects.get(name)
        if project is None:
            raise UnknownProject(name)
        return project

    def create(self, name: str) -> str | None:
        if name in self.projects:
            raise DuplicateProject(name)
        previous = self.active_project
        self.projects[name] = Project(name=name)
        self.active_project = name
        return previous

    def delete(self, name: str) -> tuple[Project, bool]:
        snapshot = self.get(name)
        del self.projects[name]
        was_active = self.active_project == name
        if was_active:
            self.active_project = None
        return snapshot, was_active

    def switch(self, name: str, timer: ActiveTimer) -> str | None:
        self.get(name)
        if timer.running and timer.project != name:
            raise TimerRunning(timer.project or "", "switch projects")
        previous = self.active_project
        self.active_project = name
        return previous

    def active(self) -> str:
        if self.active_project is None:
            raise NoActiveProject()
        return self.active_project

    def current(self) -> Project:
        return self.get(self.active())

    def restore(self, project: Project, make_active: bool) -> None:
        if project.name in self.projects:
            raise DuplicateProject(project.name)
        self.projects[project.name] = project
        if make_active:
            self.active_project = project.name

    def remove(self, name: str) -> None:
        self.get(name)
        del self.projects[name]
        if self.active_project == name:
            self.active_project = None

    def total(self, name: str) -> timedelta:
        return self.get(name).total

    def names(self) -> list[str]:
        return sorted(self.projects)
