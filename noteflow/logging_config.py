"""Logging setup for the NoteFlow app.

Components log through module loggers (or an injected one); only app.py
calls setup_logging, once, at startup.
"""

import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV = "NOTEFLOW_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

# HTTP clients log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "urllib3", "PIL")


def resolve_level(level: Optional[str] = None) -> int:
    """
    Turn a level name into a logging level.

    Falls back to NOTEFLOW_LOG_LEVEL, then INFO. Unknown names give INFO.

    >>> resolve_level("debug")
    10
    >>> resolve_level("chatty")
    20
    """
    name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").strip().upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: Optional[str] = None) -> int:
    """
    Configure root logging for the app.

    Args:
        level: Level name; None reads NOTEFLOW_LOG_LEVEL

    Returns:
        The numeric level applied
    """
    resolved = resolve_level(level)
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
    return resolved


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
