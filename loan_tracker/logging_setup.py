"""Centralized logging configuration for the ``loan_tracker`` package.

- ``configure_logging(...)`` attaches a single ``StreamHandler`` to the
  package root logger. Entry points call it once at startup.
- ``get_logger(name)`` returns a logger and makes sure the package logger
  has at least a ``NullHandler`` while nothing has been configured.

Library modules never attach their own handlers.
"""
import logging
import os
import sys
from typing import IO, Optional, Union

from loan_tracker.config import LOG_LEVEL_ENV_VAR

_PKG_LOGGER_NAME = "loan_tracker"
_CONFIGURED = False


def _parse_level(level: Optional[Union[int, str]], use_env: bool = True) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    env_val = os.getenv(LOG_LEVEL_ENV_VAR) if use_env else None
    if env_val:
        return _parse_level(env_val, use_env=False)
    return logging.INFO


def configure_logging(level: Optional[Union[int, str]] = None, fmt: str = None,
                      stream: IO[str] = sys.stderr):
    """Configure the package root logger exactly once.

    Args:
        level: Level as int or name. Falls back to the LOAN_TRACKER_LOG_LEVEL
            environment variable, then INFO.
        fmt: Optional format string.
        stream: Output stream for the handler.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s"))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name with library-safe defaults."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
