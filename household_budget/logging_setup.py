"""Logging for the ``household_budget`` package.

The Streamlit app and the scripts call :func:`configure_logging` once at
startup; every module just asks for ``get_logger(__name__)``.
"""

from __future__ import annotations

import logging
import os

_PKG_LOGGER_NAME = "household_budget"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    """Level from an int or level name, else ``HOUSEHOLD_BUDGET_LOG_LEVEL``, else INFO."""
    if isinstance(level, int):
        return level
    for text in (level, os.getenv("HOUSEHOLD_BUDGET_LOG_LEVEL")):
        if not text:
            continue
        text = text.strip().upper()
        if text.isdigit():
            return int(text)
        numeric = getattr(logging, text, None)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(level: int | str | None = None) -> None:
    """Send package logs to stderr; later calls are ignored."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_parse_level(level))
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
