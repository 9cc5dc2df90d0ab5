from __future__ import annotations

import argparse

from .engine import Engine
from .parsing import parse_duration


def cmd_new(args: argparse.Namespace, engine: Engine) -> None:
    print(engine.new(args.project_name))


def cmd_delete(args: argparse.Namespace, engine: Engine) -> None:
    print(engine.delete(args.project_name))


def cmd_switch(args: argparse.Namespace, engine: Engine) -> None:
    print(engine.switch(args.project_name))


def cmd_on(_: argparse.Namespace, engine: Engine) -> None:
    print(engine.on())


def cmd_off(args: argparse.Namespace, engine: Engine) -> None:
    print(engine.off(" ".join(args.description)))


def cmd_edit(args: argparse.Namespace, engine: Engine) -> None:
    duration = parse_duration(" ".join(args.duration))
    print(engine.edit(duration, args.description))


def cmd_undo(_: argparse.Namespace, engine: Engine) -> None:
    print(engine.undo())


def cmd_list(_: argparse.Namespace, engine: Engine) -> None:
    print(engine.list())


def cmd_time(_: argparse.Namespace, engine: Engine) -> None:
    print(engine.time())


def cmd_overview(_: argparse.Namespace, engine: Engine) -> None:
    print(engine.overview())
