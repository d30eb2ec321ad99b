"""Logging setup for the interactive session.

The terminal is owned by the UI while it runs, so records go to a file when
one is configured and are otherwise dropped.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER = "peekfind"


def _parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: str | int = "INFO", log_file: Path | None = None) -> logging.Logger:
    """Attach one handler to the package logger and return it.

    Calling again replaces the previously installed handler.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler: logging.Handler
    if log_file is None:
        handler = logging.NullHandler()
    else:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError:
            handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_parse_level(level))
    logger.propagate = False
    return logger
