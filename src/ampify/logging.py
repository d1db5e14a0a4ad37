"""Logging utilities for ampify.

One logger named ``ampify`` is shared by the library and the CLI:
- info/debug go to stdout without decoration
- warnings/errors go to stderr with a level prefix
- ``--verbose`` turns on debug output (per-node fallback and fetch notes)
"""

import logging
import sys

_logger: logging.Logger | None = None


class CliFormatter(logging.Formatter):
    """Bare messages, with ``Warning:``/``Error:`` in front of problems."""

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return f"{record.levelname.capitalize()}: {record.getMessage()}"
        return record.getMessage()


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure the ampify logger.

    Args:
        verbose: If True, show debug-level messages.

    Returns:
        The configured logger instance.
    """
    global _logger

    logger = logging.getLogger("ampify")
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    formatter = CliFormatter()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(lambda r: r.levelno < logging.WARNING)
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)

    for handler in (stdout_handler, stderr_handler):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Get the ampify logger, initializing with defaults if needed."""
    global _logger
    if _logger is None:
        _logger = setup_logging(verbose=False)
    return _logger


def debug(msg: str) -> None:
    """Log a debug message (only shown with --verbose)."""
    get_logger().debug(msg)


def info(msg: str) -> None:
    get_logger().info(msg)


def warning(msg: str) -> None:
    """Log a warning message to stderr."""
    get_logger().warning(msg)


def error(msg: str) -> None:
    """Log an error message to stderr."""
    get_logger().error(msg)
