"""Logging setup for the receiving backend.

Usage:
    from receiving.core.logging import configure_logging
    configure_logging()          # once, at app startup

Modules log through ``logging.getLogger(__name__)``; everything under the
``receiving`` namespace goes to a single stderr handler.

Environment variables:
    RECEIVING_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR. Default: INFO
"""

import logging
import sys

from .config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_logging_configured = False


def configure_logging(level: int | None = None) -> None:
    """Attach the stderr handler to the ``receiving`` logger (idempotent)."""
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = _LEVELS.get(get_settings().log_level, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT))

    root_logger = logging.getLogger("receiving")
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    root_logger.propagate = False

    _logging_configured = True
