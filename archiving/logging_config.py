"""
Logging setup for the archive management service.

Every line reads ``2026-01-06T14:05:52Z [mgmt] INFO message``, stamped with
the record's creation time in UTC. LOG_LEVEL picks the level; TRACE also
shows PocketBase filter expressions and engine calls.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LEVELS = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

# uvicorn ships its own handlers; these are re-pointed at ours
ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
# Engine notification would otherwise log every request line at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


class ISO8601Formatter(logging.Formatter):
    """``<UTC timestamp> [<source>] <LEVEL> <message>`` with tracebacks appended"""

    def __init__(self, source: str = "mgmt"):
        super().__init__()
        self.source = source

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return datetime.fromtimestamp(record.created, UTC).strftime("%Y-%m-%dT%H:%M:%SZ")

    def format(self, record: logging.LogRecord) -> str:
        line = f"{self.formatTime(record)} [{self.source}] {record.levelname} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def level_from_env(default: int = logging.INFO) -> int:
    """Level named by LOG_LEVEL, or ``default`` when unset or unknown."""
    return LEVELS.get(os.getenv("LOG_LEVEL", "").strip().upper(), default)


def configure_logging(source: str = "mgmt", level: int | None = None) -> logging.Logger:
    """Send root and uvicorn records to a single stdout handler.

    Returns:
        The root logger
    """
    if level is None:
        level = level_from_env()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ISO8601Formatter(source))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in ROUTED_LOGGERS:
        routed = logging.getLogger(name)
        routed.handlers[:] = [handler]
        routed.setLevel(level)
        routed.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
