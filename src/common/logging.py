"""
Logging configuration helpers.
Output goes to stderr in a pipe-separated format, leveled by LOG_LEVEL from settings.
The `monitoring` and `versioning` loggers follow the same level so alert and purge lines are never filtered separately.
"""

from __future__ import annotations

import logging

from src.common.settings import get_settings

_LOGGING_CONFIGURED = False


def configure_logging() -> None:
    """Configure process-wide logging from environment settings."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    settings = get_settings()
    level_name = settings.LOG_LEVEL.upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger("monitoring").setLevel(level)
    logging.getLogger("versioning").setLevel(level)
    _LOGGING_CONFIGURED = True
