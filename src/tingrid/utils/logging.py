"""Logging setup for the tingrid package."""

import logging
import sys
from typing import Optional, TextIO

PACKAGE_LOGGER = "tingrid"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose: bool = False, stream: Optional[TextIO] = None) -> logging.Logger:
    """Send package log records to a single console stream.

    Calling this again replaces the previous handler, so a run never logs
    twice or to a stream it no longer owns.

    Args:
        verbose: Log DEBUG detail; otherwise INFO progress only.
        stream: Destination (default: stdout). The CLI passes stderr whenever
            data records are written to stdout.

    Returns:
        The package logger.
    """
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, always a child of the package logger."""
    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
