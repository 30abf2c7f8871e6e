"""Process-wide logging setup for the runner and its handlers.

Loggers are plain ``logging`` loggers. The root level comes from
``BOOKPIPE_LOG_LEVEL`` and is re-read by ``configure_logging``, so a value loaded
from ``.env`` after import still applies.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LEVEL_ENV = "BOOKPIPE_LOG_LEVEL"

_configured = False


def _level(name: str | None) -> int:
    return getattr(logging, (name or "INFO").upper(), logging.INFO)


def configure_logging(level: str | None = None) -> None:
    """Install the console handler once and (re)apply the root level.

    ``level`` wins over the environment; without it ``BOOKPIPE_LOG_LEVEL`` is used.
    """
    global _configured
    if not _configured:
        logging.basicConfig(format=LOG_FORMAT)
        _configured = True
    logging.getLogger().setLevel(_level(level or os.getenv(LEVEL_ENV)))


def add_log_file(path: Path, logger_name: str = "") -> None:
    """Mirror records of ``logger_name`` (default: root) into a rotating file."""
    logger = logging.getLogger(logger_name)
    if any(
        isinstance(h, RotatingFileHandler) and Path(h.baseFilename) == path.resolve()
        for h in logger.handlers
    ):
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    if not _configured:
        configure_logging()
    return logging.getLogger(name)
