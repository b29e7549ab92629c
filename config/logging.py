#!/usr/bin/env python3
"""
partition-dedup - structlog configuration.

Centralised structlog setup for the CLI. Logs always go to stderr so that
stdout carries only the duplicate report.

Usage:
    from config.logging import configure_logging

    # At startup
    configure_logging(level="INFO", json_format=False)

    # In modules
    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("message", key=value)
"""

import logging
import sys
from typing import Any, Optional, TextIO

import structlog
from structlog.types import EventDict, WrappedLogger


def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every log line with the application name."""
    event_dict["app"] = "partition-dedup"
    return event_dict


def configure_logging(
    level: str = "WARNING",
    json_format: bool = False,
    enable_colors: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structlog for partition-dedup.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, one JSON object per line. If False, readable console lines
        enable_colors: Colorise console output (interactive terminals only)
        stream: Destination stream, stderr by default

    Example:
        >>> configure_logging(level="INFO", json_format=False)
    """
    # Standard library logging (re-applied on every call, the CLI may run several times per process)
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, level.upper()),
        force=True,
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=enable_colors))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
