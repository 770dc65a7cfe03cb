"""Logging bootstrap: one rotating log file per run.

The TUI owns the terminal, so the "inboxdash" logger writes to a file
only. INBOXDASH_LOG_FILE, INBOXDASH_LOG_DIR and INBOXDASH_LOG_LEVEL
override where and how much.

// [LAW:single-enforcer] Handlers for the inboxdash logger are attached here only.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "inboxdash"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 2
_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(threadName)s] %(message)s"


@dataclass(frozen=True)
class LogTarget:
    level_name: str
    file_path: str


_configured: LogTarget | None = None


def log_file_path() -> Path:
    explicit = os.environ.get("INBOXDASH_LOG_FILE")
    if explicit:
        return Path(explicit)
    log_dir = Path(os.environ.get("INBOXDASH_LOG_DIR", "~/.local/share/inboxdash/logs")).expanduser()
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return log_dir / f"inboxdash-{stamp}-{os.getpid()}.log"


def configure() -> LogTarget:
    """Attach the file handler once; later calls return the first target."""
    global _configured
    if _configured is not None:
        return _configured

    level_name = os.environ.get("INBOXDASH_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level_name, level = "INFO", logging.INFO

    path = log_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS,
                                  encoding="utf-8")
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    _configured = LogTarget(level_name, str(path))
    return _configured
