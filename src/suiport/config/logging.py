"""Logging configuration using structlog."""

import logging
import sys
from typing import TextIO

import structlog

from suiport.config.settings import Settings, get_settings


def configure_logging(settings: Settings | None = None, stream: TextIO | None = None) -> None:
    """Configure structlog for the application.

    Args:
        settings: Settings providing log level and debug flag, the cached
            environment settings by default.
        stream: Log destination, stdout by default. The MCP server logs to
            stderr because stdout carries the protocol.
    """
    stream = stream or sys.stdout
    settings = settings or get_settings()

    log_level = getattr(logging, settings.log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            # Use JSON in production, pretty print in debug
            structlog.dev.ConsoleRenderer()
            if settings.debug
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    # Third-party libraries (httpx, apscheduler) log through stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=log_level,
    )
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
