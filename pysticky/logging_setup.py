"""Logging setup and utilities.

Every component logs through its own named logger (`engine`, `reactor`,
one per plugin...), sharing the handlers installed by `init_logger`.
Debug mode is enabled by the `DEBUG` environment variable or `--debug`.
"""

import logging
import os

from .ansi import BOLD, DIM, RED, YELLOW, make_style, should_colorize

__all__ = [
    "LogObjects",
    "get_logger",
    "init_logger",
    "is_debug",
]

LEVEL_STYLES = {
    logging.WARNING: (YELLOW, DIM),
    logging.ERROR: (RED, DIM),
    logging.CRITICAL: (RED, BOLD),
}


class LogObjects:
    """Reusable objects for loggers."""

    debug = bool(os.environ.get("DEBUG"))
    handlers: list[logging.Handler] = []


def is_debug() -> bool:
    """Return True when debug logging is enabled."""
    return LogObjects.debug


class ScreenLogFormatter(logging.Formatter):
    """A custom formatter, adding colors based on log level."""

    def __init__(self) -> None:
        super().__init__()
        log_format = r"%(name)15s - %(message)s // %(filename)s:%(lineno)d" if is_debug() else r"%(message)s"
        colored = should_colorize()
        self._formatters = {}
        for level in (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL):
            prefix, suffix = make_style(*LEVEL_STYLES[level]) if colored and level in LEVEL_STYLES else ("", "")
            self._formatters[level] = logging.Formatter(prefix + log_format + suffix)

    def format(self, record: logging.LogRecord) -> str:
        return self._formatters[record.levelno].format(record)


def init_logger(filename: str | None = None, force_debug: bool = False) -> None:
    """Initialize the logging system.

    Args:
        filename: Optional filename to log to
        force_debug: If True, force debug level
    """
    if force_debug:
        LogObjects.debug = True

    LogObjects.handlers.clear()
    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(fmt=r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"))
        LogObjects.handlers.append(file_handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ScreenLogFormatter())
    LogObjects.handlers.append(stream_handler)


def get_logger(name: str = "pysticky", level: int | None = None) -> logging.Logger:
    """Return a named logger.

    Args:
        name (str): logger's name
        level (int): logger's level (auto if not set)
    """
    logger = logging.getLogger(name)
    if level is None:
        logger.setLevel(logging.DEBUG if is_debug() else logging.WARNING)
    else:
        logger.setLevel(level)
    logger.propagate = False
    for handler in LogObjects.handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    logger.info('Logger "%s" initialized', name)
    return logger
