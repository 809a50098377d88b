"""
Structured logging for the Joinix client core.

Configures structlog with an ECS-compatible processor chain so retry and
fallback events can be shipped to a log aggregator as JSON, or rendered
with colors on a developer console.

Usage:
    >>> from joinix.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", json_format=True, service="joinix-ios-bridge")
    >>> logger = get_logger(__name__)
    >>> logger.info("retry_attempt_failed", operation="events.fetch", attempt=1)

    Output (JSON format):
    {"@timestamp": "...", "log.level": "info", "service.name": "joinix-ios-bridge",
     "event": "retry_attempt_failed", "operation": "events.fetch", "attempt": 1}

Tags:
    logging, structlog, observability, joinix
"""

from __future__ import annotations

import contextvars
import logging
import sys
from collections.abc import Mapping
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "joinix"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "joinix",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stderr keeps CLI stdout clean for --json output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
        force=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger bound to ``name``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> Mapping[str, contextvars.Token[Any]]:
    """Bind keys into the logging context of the current task.

    Returns the tokens ``reset_context`` needs to restore what was bound
    before, so nested bindings of the same key unwind correctly.
    """
    return structlog.contextvars.bind_contextvars(**kwargs)


def reset_context(tokens: Mapping[str, contextvars.Token[Any]]) -> None:
    structlog.contextvars.reset_contextvars(**tokens)


class LogContext:
    """Scoped logging context, usable with ``with`` and ``async with``.

    Tasks started inside the scope copy the bound keys, so logs emitted by
    an operation under the executor carry ``operation`` and ``attempt``.

    Example:
        async with LogContext(event_id="e-1"):
            await service.join("e-1")
    """

    def __init__(self, **kwargs: Any):
        self._values = kwargs
        self._tokens: Mapping[str, contextvars.Token[Any]] = {}

    def __enter__(self) -> LogContext:
        self._tokens = bind_context(**self._values)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        reset_context(self._tokens)

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.__exit__(*exc_info)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "reset_context",
    "LogContext",
]
