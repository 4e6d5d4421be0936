"""
utils/logger.py
---------------
Logging setup for the client registry.

Modules call `get_logger(__name__)`; the first call installs a single
stderr handler on the root logger. stdout is left to the report that
main.py prints. `setup_logging()` can be called again to change the
level or target stream (tests use this).
"""

import logging
import sys
from typing import Optional, TextIO

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handler: Optional[logging.Handler] = None


def _resolve_level(level: Optional[str]) -> int:
    name = (level or LOG_LEVEL).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> logging.Handler:
    """
    Install (or replace) the application's root handler.

    Args:
        level: Level name such as "DEBUG"; defaults to LOG_LEVEL from config.
        stream: Target stream; defaults to sys.stderr.

    Returns:
        The handler now attached to the root logger.
    """
    global _handler
    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root.addHandler(_handler)
    root.setLevel(_resolve_level(level))
    return _handler


def get_logger(name: str) -> logging.Logger:
    """Return the named logger, configuring logging on first use."""
    if _handler is None:
        setup_logging()
    return logging.getLogger(name)
