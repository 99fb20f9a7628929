"""
Tests for core/errors.py - Unified Error Handling.
"""
import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from core.errors import (
    ContainerError,
    EntryNotFoundError,
    ErrorContext,
    ErrorSeverity,
    GraphwireError,
    InvalidConfigError,
    NotInstantiableError,
)
from di.container import Container
from di.service_locator import sort_by_dependencies


class TestHierarchy:
    """Tests for the error kinds."""

    @pytest.mark.parametrize("error_cls", [InvalidConfigError, NotInstantiableError, EntryNotFoundError])
    def test_container_errors(self, error_cls):
        """Test every kind is a ContainerError and a GraphwireError."""
        error = error_cls("broken")

        assert isinstance(error, ContainerError)
        assert isinstance(error, GraphwireError)

    def test_entry_not_found_is_invalid_config(self):
        """Test unknown ids can be caught as invalid configuration."""
        with pytest.raises(InvalidConfigError):
            raise EntryNotFoundError("Unknown component ID: db", identifier="db")

    def test_error_codes(self):
        """Test codes per kind."""
        assert InvalidConfigError("x").error_code == "INVALID_CONFIG"
        assert NotInstantiableError("x").error_code == "NOT_INSTANTIABLE"
        assert EntryNotFoundError("x").error_code == "ENTRY_NOT_FOUND"

    def test_default_severities(self):
        """Test severity defaults and overrides."""
        assert InvalidConfigError("x").severity == ErrorSeverity.ERROR
        assert EntryNotFoundError("x").severity == ErrorSeverity.WARNING
        assert InvalidConfigError("x", severity=ErrorSeverity.CRITICAL).severity == ErrorSeverity.CRITICAL


class TestGraphwireError:
    """Tests for error payloads."""

    def test_str_includes_code_and_cause(self):
        """Test string rendering."""
        error = InvalidConfigError("outer", cause=ValueError("inner"))

        assert str(error) == "[INVALID_CONFIG] outer [caused by: inner]"

    def test_identifier_and_parameter(self):
        """Test resolution details are kept."""
        error = InvalidConfigError("missing", identifier="app.Service", parameter="db")

        assert error.identifier == "app.Service"
        assert error.parameter == "db"

    def test_to_dict(self):
        """Test serialization."""
        error = NotInstantiableError("abstract", identifier="app.Mailer", recoverable=False)

        data = error.to_dict()

        assert data["error_code"] == "NOT_INSTANTIABLE"
        assert data["message"] == "abstract"
        assert data["identifier"] == "app.Mailer"
        assert data["recoverable"] is False
        assert data["context"] is None


class TestErrorContext:
    """Tests for resolution contexts attached to errors."""

    def test_capture_without_tracing(self):
        """Test context creation outside any recording span."""
        context = ErrorContext.capture("resolve", identifier="db", chain=["a", "b"])

        assert context.trace_id is None
        assert context.to_dict() == {
            "operation": "resolve",
            "identifier": "db",
            "chain": ["a", "b"],
            "trace_id": None,
            "span_id": None,
        }

    def test_alias_cycle_carries_chain(self):
        """Test the container reports the walked alias chain."""
        container = Container()
        container.set("a", "b")
        container.set("b", "a")

        with pytest.raises(InvalidConfigError) as exc_info:
            container.get("a")

        assert exc_info.value.context.operation == "resolve"
        assert exc_info.value.context.chain == ["a", "b", "a"]

    def test_dependency_cycle_carries_chain(self):
        """Test circular depends_on declarations report the cycle."""
        with pytest.raises(InvalidConfigError) as exc_info:
            sort_by_dependencies(["x", "y"], {"x": ["y"], "y": ["x"]})

        assert exc_info.value.context.operation == "set_components"
        assert exc_info.value.context.chain == ["x", "y", "x"]


class TestSpanRecording:
    """Tests for how errors show up on spans."""

    @pytest.fixture
    def traced(self):
        exporter = InMemorySpanExporter()
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        yield provider.get_tracer("tests"), exporter
        provider.shutdown()

    def test_raised_error_recorded_once(self, traced):
        """Test a propagating error yields a single exception event."""
        tracer, exporter = traced

        with pytest.raises(InvalidConfigError):
            with tracer.start_as_current_span("graphwire.test"):
                raise InvalidConfigError("broken")

        (span,) = exporter.get_finished_spans()
        assert [event.name for event in span.events] == ["exception"]
        assert span.status.status_code == StatusCode.ERROR

    def test_absorbed_error_leaves_span_ok(self, traced):
        """Test building and catching an error does not fail the span."""
        tracer, exporter = traced

        with tracer.start_as_current_span("graphwire.test"):
            try:
                raise NotInstantiableError("abstract")
            except NotInstantiableError:
                pass

        (span,) = exporter.get_finished_spans()
        assert len(span.events) == 0
        assert span.status.status_code == StatusCode.UNSET
