"""Logging setup shared by the cart modules."""
from __future__ import annotations

import logging

from .constants import DEFAULT_LOG_LEVEL, LOG_DATE_FORMAT, LOG_FORMAT

logger = logging.getLogger("gomarket")


def setup_logging(level: str | int = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Attach a console handler to the ``gomarket`` logger.

    Safe to call more than once: the handler is only added the first time,
    later calls just adjust the level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)

    # Avoid duplicate handlers if setup_logging() is called multiple times
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)

    logger.debug("Logging initialized at level %s", logging.getLevelName(level))
    return logger
