# src/digeststore/core/logging.py
"""Structured logging for digeststore.

Uses structlog on top of the standard library's logging module. Library
code only calls get_logger(); events go to the "digeststore" logger,
which has a NullHandler and no level of its own, so an application that
never calls configure_logging() sees nothing. The CLI (or any
application) calls configure_logging() once at startup.

Usage:
    from digeststore.core.logging import get_logger

    logger = get_logger(__name__)
    logger.debug("Stored object", digest=digest, length=len(data))
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

ROOT_LOGGER_NAME = "digeststore"

# Runs before the stdlib level check passes the event to a handler
_PRE_CHAIN: list[Any] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.format_exc_info,
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())

# Handler installed by configure_logging(), replaced on reconfiguration
_handler: logging.Handler | None = None


def configure_logging(level: str = "INFO", *, json_output: bool = False) -> None:
    """Send digeststore events to stderr at the given level.

    Args:
        level: Minimum level to emit (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines instead of console output

    Raises:
        ValueError: If level is not a valid log level
    """
    global _handler

    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of {sorted(VALID_LOG_LEVELS)}")

    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _handler is not None:
        root.removeHandler(_handler)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_upper))
    root.propagate = False
    _handler = handler


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger writing to the stdlib logger name.

    Names outside the "digeststore" hierarchy are placed under it.
    """
    if name is None:
        name = ROOT_LOGGER_NAME
    elif name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PRE_CHAIN,
        wrapper_class=structlog.stdlib.BoundLogger,
    )
