from __future__ import annotations

import os
import sys
from typing import Optional

from loguru import logger as _loguru_logger

_LOGGER = None

FALLBACK_TAG = "native_alarm"
FALLBACK_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "{level:<8} | {extra[tag]} | {message}"
)


def _configure_fallback(exc: Optional[Exception] = None):
    """Stdout-only logger for when config.yaml cannot be loaded."""
    _loguru_logger.remove()
    _loguru_logger.configure(extra={"tag": FALLBACK_TAG})
    _loguru_logger.add(
        sys.stdout,
        format=os.environ.get("LOG_FORMAT", FALLBACK_FORMAT),
        level=os.environ.get("LOG_LEVEL", "INFO"),
    )
    if exc and os.environ.get("LOG_FALLBACK_DEBUG"):
        _loguru_logger.warning(f"Using fallback logger configuration: {exc}")
    return _loguru_logger


def setup_logging():
    """
    Return the shared loguru logger. Bridge modules call this at import time
    and log through `logger.bind(tag=TAG)`.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    try:
        from config.logger import setup_logging as config_setup_logging

        _LOGGER = config_setup_logging()
    except Exception as exc:
        _LOGGER = _configure_fallback(exc)
    return _LOGGER
