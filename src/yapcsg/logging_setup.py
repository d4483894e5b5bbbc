"""Logging configuration for yapCSG.

Library modules call :func:`get_logger`, which wraps a standard library
logger in a structlog bound logger.  Nothing is printed below WARNING
until an application calls :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, List

import structlog

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(
    level: str = "INFO",
    enable_colors: bool = True,
    enable_json: bool = False,
    extra_processors: List[Any] | None = None,
) -> None:
    """Configure structured logging for yapCSG.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        enable_colors: Enable colored output for console
        enable_json: Use JSON output format
        extra_processors: Additional structlog processors
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=LOG_LEVELS[level.upper()],
    )
    logging.getLogger("yapcsg").setLevel(LOG_LEVELS[level.upper()])

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
    ]

    if extra_processors:
        processors.extend(extra_processors)

    if enable_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=enable_colors and sys.stderr.isatty())
        )

    structlog.configure(
        processors=processors,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger backed by the stdlib logger ``name``.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Bound logger; its level filtering follows stdlib logging
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )

