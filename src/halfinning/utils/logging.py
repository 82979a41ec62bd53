"""Structured logging setup shared by every module."""

from __future__ import annotations

import logging

import structlog

_configured = False


def configure_logging(level: str | int = "INFO") -> None:
    """Configure structlog console rendering at the given level."""
    global _configured
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    if not _configured:
        from halfinning.config import settings

        configure_logging(settings.log_level)
    return structlog.get_logger(name)
