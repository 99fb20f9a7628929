"""
Tests for observability/logging.py and observability/tracing.py.

Covers:
- Logger naming under the graphwire hierarchy
- LogContext binding (sync and async)
- Structlog processors
- Tracing setup toggles
"""
import pytest
import structlog

from observability.logging import (
    LogContext,
    LoggingConfig,
    add_library_context,
    add_trace_context,
    get_logger,
)
from observability import setup_observability, shutdown_observability
from observability.tracing import TracingConfig, get_tracer, setup_tracing, shutdown_tracing


# =============================================================================
# Logging Tests
# =============================================================================

class TestGetLogger:
    """Tests for get_logger."""

    def test_logger_usable(self):
        """Test that loggers accept structured keywords."""
        logger = get_logger("di.container")

        logger.debug("Definition registered", identifier="db")


class TestLogContext:
    """Tests for contextvar binding."""

    def test_sync_binding(self):
        """Test values are bound inside the block only."""
        with LogContext(component_id="db"):
            assert structlog.contextvars.get_contextvars()["component_id"] == "db"

        assert "component_id" not in structlog.contextvars.get_contextvars()

    def test_nested_binding_restores_outer_value(self):
        """Test inner blocks restore the outer value on exit."""
        with LogContext(component_id="outer"):
            with LogContext(component_id="inner"):
                assert structlog.contextvars.get_contextvars()["component_id"] == "inner"
            assert structlog.contextvars.get_contextvars()["component_id"] == "outer"

    @pytest.mark.asyncio
    async def test_async_binding(self):
        """Test async usage."""
        async with LogContext(component_id="cache"):
            assert structlog.contextvars.get_contextvars()["component_id"] == "cache"

        assert "component_id" not in structlog.contextvars.get_contextvars()


class TestProcessors:
    """Tests for custom structlog processors."""

    def test_library_context(self):
        """Test library and environment fields."""
        processor = add_library_context("testing")

        event = processor(None, "info", {"event": "x"})

        assert event["library"] == "graphwire"
        assert event["environment"] == "testing"

    def test_trace_context_without_span(self):
        """Test no ids are added outside a recording span."""
        event = add_trace_context(None, "info", {"event": "x"})

        assert "trace_id" not in event


# =============================================================================
# Tracing Tests
# =============================================================================

class TestTracing:
    """Tests for tracing setup."""

    def test_disabled_tracing_returns_none(self):
        """Test the no-op provider stays when tracing is off."""
        assert setup_tracing(TracingConfig(enabled=False)) is None

    def test_get_tracer_spans(self):
        """Test spans can always be opened through the API."""
        tracer = get_tracer("tests")

        with tracer.start_as_current_span("graphwire.test") as span:
            span.set_attribute("graphwire.identifier", "db")

    def test_shutdown_without_provider(self):
        """Test shutdown is safe when nothing was installed."""
        shutdown_tracing()


class TestSetupObservability:
    """Tests for the combined setup entry point."""

    def test_setup_and_shutdown(self):
        """Test logging and tracing can be set up and torn down together."""
        setup_observability(
            LoggingConfig(level="DEBUG", log_to_console=False),
            TracingConfig(enabled=False),
        )
        try:
            get_logger("tests").info("Observability configured")
        finally:
            shutdown_observability()
