"""
GRAPHWIRE - Structured Logging

structlog routed through the stdlib ``graphwire`` logger, so host
applications decide where wiring diagnostics end up. Events carry the
OpenTelemetry trace ids of the span they were logged in, and any values
bound with :class:`LogContext` (the service locator binds ``component_id``
while a component initializes).

Usage:
    from observability.logging import setup_logging, get_logger

    setup_logging(LoggingConfig(level="DEBUG", json_format=True))

    logger = get_logger(__name__)
    logger.info("Component registered", component_id="db")
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, List, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

ROOT_LOGGER_NAME = "graphwire"

_configured: bool = False


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    level: str = field(
        default_factory=lambda: os.getenv("GRAPHWIRE_LOG_LEVEL", "INFO").upper()
    )
    json_format: bool = field(
        default_factory=lambda: os.getenv("GRAPHWIRE_LOG_FORMAT", "console").lower() == "json"
    )
    environment: str = field(
        default_factory=lambda: os.getenv("GRAPHWIRE_ENVIRONMENT", "development")
    )
    # Attach a stdout handler when the host has not configured one
    log_to_console: bool = True
    enable_trace_context: bool = True


def add_trace_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Copy trace_id / span_id of the recording span into the event."""
    from opentelemetry import trace

    span = trace.get_current_span()
    if span.is_recording():
        span_context = span.get_span_context()
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")
    return event_dict


def add_library_context(environment: str) -> Processor:
    """Processor tagging events with the library name and environment."""

    def processor(
        logger: WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("library", ROOT_LOGGER_NAME)
        event_dict.setdefault("environment", environment)
        return event_dict

    return processor


def _build_processors(config: LoggingConfig) -> List[Processor]:
    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_library_context(config.environment),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if config.enable_trace_context:
        processors.append(add_trace_context)
    processors.extend([
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ])
    if config.json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def setup_logging(config: Optional[LoggingConfig] = None, force: bool = False) -> None:
    """
    Configure structlog and the ``graphwire`` stdlib logger.

    Runs once; later calls are ignored unless ``force`` is set.
    """
    global _configured

    if _configured and not force:
        return

    config = config or LoggingConfig()

    structlog.configure(
        processors=_build_processors(config),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, config.level, logging.INFO)
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    if config.log_to_console and not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)

    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Logger for a module, named under the ``graphwire`` hierarchy.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Definition registered", identifier="db")
    """
    if not _configured:
        setup_logging()

    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return structlog.get_logger(name)


def shutdown_logging() -> None:
    """Flush and detach the handlers installed by setup_logging."""
    global _configured

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        handler.flush()
        handler.close()
        root.removeHandler(handler)

    _configured = False


class LogContext:
    """
    Bind values to every log event emitted inside the block.

    Previous values of the same keys are restored on exit. Works with
    ``with`` and ``async with``.

    Example:
        >>> async with LogContext(component_id="db"):
        ...     await component.init_component()
    """

    def __init__(self, **values: Any):
        self.values = values
        self._bound = None

    def __enter__(self) -> "LogContext":
        self._bound = structlog.contextvars.bound_contextvars(**self.values)
        self._bound.__enter__()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._bound.__exit__(*exc_info)
        self._bound = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.__exit__(*exc_info)
