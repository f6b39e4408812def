"""Root logger setup for the command-line tools."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def configure_logging(level: str = "WARNING") -> None:
    """Configure the root logger with a single stderr handler.

    Stdout is reserved for command output (JSON, request listings, progress).

    Args:
        level: Log level name (``"INFO"``, ``"DEBUG"``, ...).
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())
    root.addHandler(handler)
