"""
GRAPHWIRE - Unified Error Handling

Error kinds raised by the container, the service locator and the injection
machinery:
- InvalidConfigError: malformed registration, unresolvable parameter,
  alias cycle, circular ``depends_on`` declaration
- NotInstantiableError: abstract class / interface without implementation,
  or a target whose constructor cannot be introspected
- EntryNotFoundError: unknown component id requested with throwing enabled

Every error carries a severity and an optional resolution context (operation,
identifier chain, trace ids). Spans opened around container operations
record an error once, when it propagates out of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from opentelemetry import trace


class ErrorSeverity(Enum):
    """How badly a failure affects wiring."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"    # Probe-style lookups, caller may recover
    ERROR = "error"        # The requested object cannot be built
    CRITICAL = "critical"  # Registration is inconsistent, startup cannot proceed


@dataclass
class ErrorContext:
    """Where in the wiring a failure happened."""

    operation: str
    identifier: Optional[str] = None
    chain: List[str] = field(default_factory=list)
    trace_id: Optional[str] = None
    span_id: Optional[str] = None

    @classmethod
    def capture(
        cls,
        operation: str,
        identifier: Optional[str] = None,
        chain: Optional[Sequence[str]] = None,
    ) -> "ErrorContext":
        """Build a context, attaching ids of the current span if it records."""
        context = cls(operation=operation, identifier=identifier, chain=list(chain or []))
        span = trace.get_current_span()
        if span.is_recording():
            span_context = span.get_span_context()
            context.trace_id = format(span_context.trace_id, "032x")
            context.span_id = format(span_context.span_id, "016x")
        return context

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "identifier": self.identifier,
            "chain": list(self.chain),
            "trace_id": self.trace_id,
            "span_id": self.span_id,
        }


class GraphwireError(Exception):
    """
    Base exception for all GRAPHWIRE errors.

    Args:
        message: Human readable description
        identifier: Registry id or class path the failure is about
        context: Resolution context
        severity: Overrides the class default
        cause: Underlying exception, also kept as ``__cause__`` when raised with ``from``
        recoverable: False when the registry itself is inconsistent
    """

    default_severity: ErrorSeverity = ErrorSeverity.ERROR
    error_code: str = "GRAPHWIRE_ERROR"

    def __init__(
        self,
        message: str,
        identifier: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        severity: Optional[ErrorSeverity] = None,
        cause: Optional[BaseException] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.identifier = identifier
        self.context = context
        self.severity = severity or self.default_severity
        self.cause = cause
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Structured form for log events."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "identifier": self.identifier,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "context": self.context.to_dict() if self.context else None,
            "cause": repr(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        text = f"[{self.error_code}] {self.message}"
        if self.cause:
            text += f" [caused by: {self.cause}]"
        return text


class ContainerError(GraphwireError):
    """Base class for dependency-injection failures."""

    error_code = "CONTAINER_ERROR"


class InvalidConfigError(ContainerError):
    """Malformed definition, unresolvable parameter or dependency cycle."""

    error_code = "INVALID_CONFIG"

    def __init__(self, message: str, parameter: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.parameter = parameter


class NotInstantiableError(ContainerError):
    """Resolution ended at something that cannot be constructed."""

    error_code = "NOT_INSTANTIABLE"


class EntryNotFoundError(InvalidConfigError):
    """Requested id has neither a definition nor a cached instance."""

    error_code = "ENTRY_NOT_FOUND"
    default_severity = ErrorSeverity.WARNING
