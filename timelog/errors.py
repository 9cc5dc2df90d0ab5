from __future__ import annotations


class HatError(Exception):
    pass


class DuplicateProject(HatError):
    def __init__(self, name: str):
        super().__init__(f"Project '{name}' already exists.")
        self.name = name


class UnknownProject(HatError):
    def __init__(self, name: str):
        super().__init__(f"There is no project named '{name}'.")
        self.name = name


class InvalidProjectName(HatError):
    def __init__(self) -> None:
        super().__init__("Project names must not be empty.")


class NoActiveProject(HatError):
    def __init__(self) -> None:
        super().__init__("You do not currently have a project selected.")


class TimerAlreadyRunning(HatError):
    def __init__(self, project: str):
        super().__init__(f"You are already tracking time for project '{project}'.")
        self.project = project


class TimerNotRunning(HatError):
    def __init__(self) -> None:
        super().__init__("You have not started tracking your time.")


class TimerRunning(HatError):
    def __init__(self, project: str, action: str):
        super().__init__(f"Cannot {action} while tracking time for project '{project}'. Stop the timer first.")
        self.project = project


class NothingToUndo(HatError):
    def __init__(self) -> None:
        super().__init__("There is nothing to undo.")


class NoTimeLogged(HatError):
    def __init__(self, project: str):
        super().__init__(f"You have not logged any time for project '{project}'.")
        self.project = project


class MissingDescription(HatError):
    def __init__(self) -> None:
        super().__init__("Cannot log an entry with no description.")


class InvalidDuration(HatError):
    pass


class NegativeDuration(HatError):
    def __init__(self) -> None:
        super().__init__("The current time is before the timer's start time. Check the system clock.")


class StateFileError(HatError):
    pass
