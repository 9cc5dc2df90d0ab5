from __future__ import annotations

import logging
import os

from .constants import LOG_LEVEL_ENV

logger = logging.getLogger("timelogger")


def configure_logging(verbose: bool = False) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        level_name = os.getenv(LOG_LEVEL_ENV, "WARNING").strip().upper()
        level = getattr(logging, level_name, None)
        if not isinstance(level, int):
            level = logging.WARNING

    logger.setLevel(level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
