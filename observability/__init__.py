"""
GRAPHWIRE - Observability Package

Structured logging and distributed tracing for the wiring engine.

Components:
- tracing: OpenTelemetry tracer access and optional SDK provider setup
- logging: Structlog integration with trace context propagation

Usage:
    from observability import setup_observability, get_logger

    # Initialize at application startup
    setup_observability()

    logger = get_logger(__name__)
"""
from typing import Optional

from .logging import (
    LogContext,
    LoggingConfig,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from .tracing import (
    TracingConfig,
    get_tracer,
    setup_tracing,
    shutdown_tracing,
)


def setup_observability(
    logging_config: Optional[LoggingConfig] = None,
    tracing_config: Optional[TracingConfig] = None,
) -> None:
    """Configure logging and tracing in one call."""
    setup_logging(logging_config)
    setup_tracing(tracing_config)


def shutdown_observability() -> None:
    """Flush and tear down logging and tracing."""
    shutdown_tracing()
    shutdown_logging()


__all__ = [
    "setup_observability",
    "shutdown_observability",
    # Logging
    "setup_logging",
    "shutdown_logging",
    "get_logger",
    "LoggingConfig",
    "LogContext",
    # Tracing
    "setup_tracing",
    "shutdown_tracing",
    "get_tracer",
    "TracingConfig",
]
