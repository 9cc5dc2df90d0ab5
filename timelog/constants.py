from __future__ import annotations

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATA_FILE_ENV = "TIMELOGGER_DATA_FILE"
LOG_LEVEL_ENV = "TIMELOGGER_LOG_LEVEL"
DEFAULT_DATA_FILE = "~/.timelogger.json"
