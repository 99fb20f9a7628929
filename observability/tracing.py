"""
GRAPHWIRE - Distributed Tracing with OpenTelemetry

The container and service locator create spans through the OpenTelemetry
API only. Nothing is exported unless the host application installs a
provider, either its own or the one built by ``setup_tracing``.

Usage:
    from observability.tracing import setup_tracing, get_tracer

    # Setup at startup (optional)
    setup_tracing(TracingConfig(enabled=True, console_export=True))

    tracer = get_tracer(__name__)
    with tracer.start_as_current_span("wire_application") as span:
        span.set_attribute("components", 12)
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, SERVICE_VERSION
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

# Global state
_tracer_provider: Optional[TracerProvider] = None


@dataclass
class TracingConfig:
    """Configuration for OpenTelemetry tracing."""

    service_name: str = "graphwire"
    service_version: str = "1.0.0"
    enabled: bool = field(
        default_factory=lambda: os.getenv("GRAPHWIRE_TRACING_ENABLED", "false").lower() == "true"
    )
    console_export: bool = field(
        default_factory=lambda: os.getenv("GRAPHWIRE_TRACING_CONSOLE", "false").lower() == "true"
    )


def setup_tracing(config: Optional[TracingConfig] = None) -> Optional[TracerProvider]:
    """
    Install an SDK tracer provider as the global provider.

    Returns the provider, or ``None`` when tracing is disabled (the
    OpenTelemetry default no-op provider stays in place).
    """
    global _tracer_provider

    if _tracer_provider is not None:
        return _tracer_provider

    config = config or TracingConfig()
    if not config.enabled:
        return None

    resource = Resource.create({
        SERVICE_NAME: config.service_name,
        SERVICE_VERSION: config.service_version,
    })
    _tracer_provider = TracerProvider(resource=resource)

    if config.console_export:
        _tracer_provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(_tracer_provider)
    return _tracer_provider


def get_tracer(name: str, version: str = "1.0.0") -> trace.Tracer:
    """
    Get a tracer instance for manual instrumentation.

    Args:
        name: Tracer name, typically __name__ of the module
        version: Tracer version string
    """
    return trace.get_tracer(name, version)


def shutdown_tracing() -> None:
    """Flush pending spans and forget the installed provider."""
    global _tracer_provider
    if _tracer_provider is not None:
        _tracer_provider.shutdown()
    _tracer_provider = None
