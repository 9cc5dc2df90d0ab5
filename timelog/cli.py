from __future__ import annotations

import argparse
import sys

from .commands import (
    cmd_delete,
    cmd_edit,
    cmd_list,
    cmd_new,
    cmd_off,
    cmd_on,
    cmd_overview,
    cmd_switch,
    cmd_time,
    cmd_undo,
)
from .engine import Engine
from .errors import HatError
from .logging_config import configure_logging
from .storage import resolve_store

COMMAND_NAMES = ("list", "on", "off", "edit", "undo", "time", "new", "delete", "switch")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timelogger",
        description="An extremely lightweight time tracking tool for work. "
        "Run with a project name to switch to it, or with no arguments for an overview.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging on stderr")
    subparsers = parser.add_subparsers(dest="command", title="Available commands", metavar="")

    list_ = subparsers.add_parser("list", help="List all projects and their total time")
    list_.set_defaults(func=cmd_list)

    on = subparsers.add_parser("on", help="Start the timer for the active project")
    on.set_defaults(func=cmd_on)

    off = subparsers.add_parser("off", help="Stop the timer and log an entry")
    off.add_argument("description", nargs="*", help="Description of the logged time")
    off.set_defaults(func=cmd_off)

    edit = subparsers.add_parser("edit", help="Edit the last logged time of the active project")
    edit.add_argument("duration", nargs="+", help="New duration (for example: '5h', '1h 30m', '45 minutes')")
    edit.add_argument("-d", "--description", help="Replace the entry's description as well")
    edit.set_defaults(func=cmd_edit)

    undo = subparsers.add_parser("undo", help="Undo the last change, or cancel the running timer")
    undo.set_defaults(func=cmd_undo)

    time = subparsers.add_parser("time", help="List all logged times for the active project")
    time.set_defaults(func=cmd_time)

    new = subparsers.add_parser("new", help="Add a new project and select it")
    new.add_argument("project_name")
    new.set_defaults(func=cmd_new)

    delete = subparsers.add_parser("delete", help="Delete a project")
    delete.add_argument("project_name")
    delete.set_defaults(func=cmd_delete)

    switch = subparsers.add_parser("switch", help="Select the active project (same as passing its name)")
    switch.add_argument("project_name")
    switch.set_defaults(func=cmd_switch)

    return parser


def expand_project_shorthand(argv: list[str]) -> list[str]:
    for index, token in enumerate(argv):
        if token.startswith("-"):
            continue
        if token not in COMMAND_NAMES:
            return argv[:index] + ["switch"] + argv[index:]
        break
    return argv


def main(argv: list[str] | None = None) -> int:
    raw_args = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    args = parser.parse_args(expand_project_shorthand(raw_args))
    configure_logging(args.verbose)

    engine = Engine(resolve_store())
    func = getattr(args, "func", cmd_overview)

    try:
        func(args, engine)
    except HatError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0
