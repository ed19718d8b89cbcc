"""Logging configuration shared by the collector and aggregator."""

from __future__ import annotations

import logging
import sys


class _BelowLevel(logging.Filter):
    """Pass only records strictly below a level."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self._level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self._level


def setup_logging(
    level: int = logging.INFO,
    module_name: str = "src",
) -> logging.Logger:
    """Configure and return a logger with consistent formatting.

    Progress goes to stdout, warnings and errors go to stderr. Module
    loggers created with ``logging.getLogger(__name__)`` under ``src``
    propagate here.

    Args:
        level: Logging level (default INFO).
        module_name: Name for the logger instance.

    Returns:
        Configured logger.
    """
    logger = logging.getLogger(module_name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(_BelowLevel(logging.WARNING))
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)

    logger.addHandler(stdout_handler)
    logger.addHandler(stderr_handler)
    logger.propagate = False

    return logger
