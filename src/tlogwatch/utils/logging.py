"""
Logging setup for tlogwatch.

Library modules only create loggers; the CLI calls configure_logging()
once per process.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    level: str = "INFO",
    fmt: str = DEFAULT_FORMAT,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure the root handler.

    Args:
        level: Level name (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        fmt: logging format string
        stream: Output stream (default: stderr)
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level}")

    logging.basicConfig(
        level=numeric,
        format=fmt,
        stream=stream or sys.stderr,
        force=True,
    )
