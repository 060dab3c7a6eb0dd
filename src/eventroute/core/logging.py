"""
structlog setup for processes embedding the registry.
Console renderer for humans, JSON renderer for log shippers.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, TextIO

import structlog

if TYPE_CHECKING:
    from eventroute.core.config import Settings

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(
    level: str = "INFO",
    *,
    json_format: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog globally.

    Args:
        level (str): Minimum level name; unknown names fall back to INFO.
        json_format (bool): JSON lines when True, colored console output when False.
        stream (TextIO | None): Output stream, stdout by default.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream is None and sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_LEVELS.get(level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=False,
    )


def configure_from_settings(settings: Settings) -> None:
    """Apply log_level / log_json from eventroute.core.config.Settings."""
    configure_logging(settings.log_level, json_format=settings.log_json)
