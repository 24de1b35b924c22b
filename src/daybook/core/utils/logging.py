"""
Logging configuration using loguru.

Library modules log through ``from loguru import logger`` and never touch
sinks.  Front ends call :func:`setup_logging` (or
:func:`setup_logging_from_config`) once at startup.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from daybook.core.config import Config

CONSOLE_FORMAT = "<level>[{level.name}]</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Replace loguru's default sink with a console sink and an optional file sink.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Path to log file. If None, only logs to stderr.
        rotation: Log file rotation size.
        retention: How long to keep rotated logs.
    """
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)

    if log_file:
        logger.add(log_file, level=level, format=FILE_FORMAT, rotation=rotation, retention=retention)


def setup_logging_from_config(config: Config, *, verbose: bool = False) -> None:
    """Configure sinks from the ``logging`` section; ``verbose`` forces DEBUG."""
    level = "DEBUG" if verbose else str(config.get("logging.level", "WARNING"))
    setup_logging(level=level, log_file=config.get("logging.file") or None)
