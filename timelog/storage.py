from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from .constants import DATA_FILE_ENV, DEFAULT_DATA_FILE
from .errors import StateFileError
from .logging_config import logger
from .state import empty_payload


class Storage:
    def __init__(self, path: Path):
        self.path = path

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            logger.debug("no state file at %s, starting empty", self.path)
            return empty_payload()
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except json.JSONDecodeError as exc:
            raise StateFileError(f"Could not parse state file {self.path}: {exc}") from exc
        except OSError as exc:
            raise StateFileError(f"Could not read state file {self.path}: {exc}") from exc
        logger.debug("loaded state from %s", self.path)
        return payload

    def save(self, payload: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
                fh.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StateFileError(f"Could not write state file {self.path}: {exc}") from exc
        logger.debug("saved state to %s", self.path)


def resolve_store() -> Storage:
    env_path = os.getenv(DATA_FILE_ENV)
    if env_path:
        return Storage(Path(env_path).expanduser())
    return Storage(Path(DEFAULT_DATA_FILE).expanduser())
