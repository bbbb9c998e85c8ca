"""Structured logging for the itinerary core, built on structlog.

Development runs get coloured console lines, production runs get one JSON
object per line. Output defaults to stderr so that CLI views and exported
calendars written to stdout are never interleaved with log lines.

Modules log snake_case event names with keyword context, e.g.
``log.info("dataset_loaded", events=42)``.
"""

import logging
import sys
from typing import TextIO

import structlog


def setup_logging(
    json_output: bool = False,
    log_level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and route stdlib logging through the same stream.

    Args:
        json_output: Render JSON lines instead of console output.
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        stream: Destination stream; defaults to sys.stderr.
    """
    out = stream or sys.stderr
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(out)]
    root.setLevel(numeric_level)


def setup_logging_from_config(config) -> None:
    """Apply the ``log_json``/``log_level`` settings of an ItineraryConfig."""
    setup_logging(json_output=config.log_json, log_level=config.log_level)


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger bound with the calling module's name (pass ``__name__``)."""
    return structlog.get_logger(name)
