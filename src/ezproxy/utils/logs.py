"""Logging configuration, called once by the CLI callback.

Every module that does ``logger = logging.getLogger(__name__)`` inherits this
config. Level precedence: --verbose flag > EZPROXY_LOG_LEVEL > WARNING.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "EZPROXY_LOG_LEVEL"

_FMT_MINIMAL = "%(levelname)s: %(message)s"
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# Third-party loggers that are noisy at DEBUG
_NOISY_LOGGERS = ("git",)


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger with a single stderr handler."""
    numeric_level = _parse_level(level or os.environ.get(LOG_LEVEL_ENV, "WARNING"))

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    if numeric_level <= logging.DEBUG:
        handler.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_DEBUG))
    else:
        handler.setFormatter(logging.Formatter(_FMT_MINIMAL))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.INFO))


def _parse_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if isinstance(value, int):
        return value
    return logging.WARNING
