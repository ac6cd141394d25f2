"""
Centralized logging configuration for the knockout_odds package.

Library modules obtain child loggers through :func:`get_logger` and never
install handlers themselves; applications call :func:`setup_logging` once.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path

ROOT_LOGGER_NAME = "knockout_odds"

SIMPLE_FORMAT = "%(levelname)s: %(message)s"
DETAILED_FORMAT = (
    "%(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
)


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    format_style: str = "detailed",
    include_timestamp: bool = True,
) -> logging.Logger:
    """Attach handlers to the package logger.

    Library modules never call this; applications call it once before
    running simulations.

    Args:
        level: Logging level name or number. Defaults to logging.INFO.
        log_file: Optional file that receives the same records as stdout.
        format_style: "simple" (level and message) or "detailed" (logger,
            function and line). Defaults to "detailed".
        include_timestamp: Prefix detailed records with the time.

    Returns:
        The configured ``knockout_odds`` logger.
    """
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging level {name!r}")

    if format_style == "simple":
        format_string = SIMPLE_FORMAT
    elif format_style == "detailed":
        format_string = DETAILED_FORMAT
        if include_timestamp:
            format_string = "%(asctime)s - " + format_string
    else:
        raise ValueError(
            f"format_style must be 'simple' or 'detailed', got {format_style!r}"
        )
    formatter = logging.Formatter(format_string)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module/component.

    Args:
        name: Name of the component (usually __name__).

    Returns:
        Logger instance under the package's logger hierarchy.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


@contextmanager
def log_timing(
    logger: logging.Logger, operation: str, level: int = logging.INFO
):
    """Context manager to log the timing of operations.

    Args:
        logger: Logger to use for timing messages.
        operation: Description of the operation being timed.
        level: Logging level for timing messages. Defaults to logging.INFO.

    Examples:
        >>> logger = get_logger(__name__)
        >>> with log_timing(logger, "simulating 100,000 trials"):
        ...     result = aggregator.run(bracket, ratings, fixture)
    """
    start_time = time.time()
    logger.log(level, "Starting %s", operation)

    try:
        yield
        elapsed_time = time.time() - start_time
        logger.log(level, "Completed %s in %.2fs", operation, elapsed_time)
    except Exception as exception:
        elapsed_time = time.time() - start_time
        logger.error(
            "Failed %s after %.2fs: %s", operation, elapsed_time, exception
        )
        raise
