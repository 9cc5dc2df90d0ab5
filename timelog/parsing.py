from __future__ import annotations

import re
from datetime import datetime, timedelta

from .constants import DATETIME_FORMAT
from .errors import InvalidDuration

UNIT_SECONDS = {
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
}
COMPONENT_PATTERN = re.compile(r"(\d+(?:\.\d+)?|\.\d+)\s*([a-z]+)")
DURATION_EXAMPLES = "Examples: '5h', '1h30m', '45m', '1.5 hours', '90 seconds'."


def parse_duration(value: str) -> timedelta:
    normalized = value.strip().lower()
    if not normalized:
        raise InvalidDuration(f"Missing duration. {DURATION_EXAMPLES}")
    if normalized.startswith("-"):
        raise InvalidDuration(f"Duration '{value}' must not be negative.")

    total = 0.0
    position = 0
    for match in COMPONENT_PATTERN.finditer(normalized):
        if normalized[position:match.start()].strip():
            break
        unit = match.group(2)
        if unit not in UNIT_SECONDS:
            raise InvalidDuration(f"Unknown duration unit '{unit}'. {DURATION_EXAMPLES}")
        total += float(match.group(1)) * UNIT_SECONDS[unit]
        position = match.end()

    if position == 0 or normalized[position:].strip():
        raise InvalidDuration(f"Invalid duration '{value}'. {DURATION_EXAMPLES}")
    try:
        return timedelta(seconds=round(total))
    except OverflowError as exc:
        raise InvalidDuration(f"Duration '{value}' is too large. {DURATION_EXAMPLES}") from exc


def fmt_duration(delta: timedelta) -> str:
    total_seconds = int(delta.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def humanize_duration(delta: timedelta) -> str:
    total_seconds = max(0, int(delta.total_seconds()))
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)

    parts = []
    for amount, suffix in ((days, "d"), (hours, "h"), (minutes, "m"), (seconds, "s")):
        if amount:
            parts.append(f"{amount}{suffix}")
    return " ".join(parts) if parts else "0s"


def fmt_instant(value: datetime) -> str:
    return value.astimezone().strftime(DATETIME_FORMAT)
