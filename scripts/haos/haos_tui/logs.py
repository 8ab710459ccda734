"""Log sink setup. The terminal belongs to the UI, so logs go to a file."""

from __future__ import annotations

import logging
from pathlib import Path

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_LEVELS = {
    "off": None,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE,
}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"
PACKAGE_LOGGER = "haos_tui"


def configure_logging(level: str, path: Path | str) -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    resolved = LOG_LEVELS[level]
    if resolved is None:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)
        return logger

    handler = logging.FileHandler(Path(path).expanduser(), encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolved)
    return logger
