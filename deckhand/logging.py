"""Logging configuration for Deckhand."""

import logging
import sys

import structlog

from deckhand.config import get_config


def configure_logging(level: str | None = None, json_format: bool | None = None) -> None:
    """Configure structured logging for Deckhand.

    Args:
        level: Optional level override (e.g. from a ``--verbose`` flag)
        json_format: Force (or suppress) JSON log lines regardless of
            ``logging.format``
    """
    config = get_config()

    level_name = (level or config.logging.level).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format is None:
        json_format = config.logging.format == "json"
    if not json_format:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())

    # Logs go to stderr; stdout carries mirrored command output and results.
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger instance.

    Args:
        name: Optional logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


log = get_logger(__name__)
