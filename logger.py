"""
Structured logging for the server.

structlog with ISO timestamps and log level. LOG_FORMAT=json emits one JSON
object per line; anything else renders human-readable console lines.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from config import LOG_FORMAT, LOG_LEVEL

LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)


def configure_structlog() -> None:
    """Configure structlog once: timestamp, level, renderer picked by LOG_FORMAT."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if LOG_FORMAT == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("file_stored", stored_name="cat1700000000000.png", size=1024)
    """
    return structlog.get_logger(name).bind(logger=name)
