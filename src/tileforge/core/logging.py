"""Structured logging configuration for the TileForge play-mode runtime.

The engine logs turn milestones and local recoveries through structlog;
player-facing feedback is carried separately by floating messages. The
orchestrator binds the current map id into the context, so every event
emitted during a turn says which map it happened on.

Example:
    >>> from tileforge.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Map switched", map_id="cave", x=3, y=4)
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor

from tileforge.core.config import get_settings


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

_STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every entry with the runtime name and version."""
    event_dict["app"] = "tileforge"
    event_dict.setdefault("version", get_settings().app_version)
    return event_dict


def configure_logging(
    *,
    level: str | None = None,
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """Configure application-wide logging.

    Args:
        level: Logging level name. Defaults to ``Settings.log_level``, or
            DEBUG when ``Settings.debug`` is on.
        json_format: Render JSON lines instead of the console format.
        log_file: Optional file that also receives stdlib log records.

    Example:
        >>> configure_logging(level="DEBUG")
    """
    if level is None:
        settings = get_settings()
        level = "DEBUG" if settings.debug else settings.log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        renderer: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderer = [
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=[*shared_processors, *renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format=_STDLIB_FORMAT, level=numeric_level, stream=sys.stdout, force=True)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(_STDLIB_FORMAT))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structlog logger, typically ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind key/value pairs into every subsequent log entry.

    Rebinding a key replaces its value, so the orchestrator simply binds
    ``map_id`` again after each map switch.

    Example:
        >>> bind_context(map_id="overworld")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
]
