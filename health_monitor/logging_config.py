"""
Logging setup for the metrics engine.

Library modules call get_logger(__name__) and never attach handlers on
import; entry points call configure_logging() once.
"""
import logging
import sys
from typing import Optional

from health_monitor.config import config

ROOT_LOGGER_NAME = "health_monitor"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: Optional[str] = None, stream=None) -> logging.Logger:
    """
    Attach a single stream handler to the package logger.

    Safe to call repeatedly; an existing handler is replaced rather than
    duplicated.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    resolved = (level or config.log_level).upper()
    logger.setLevel(getattr(logging, resolved, logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def reset_logging() -> None:
    """Remove package handlers and restore propagation."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
