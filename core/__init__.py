"""
GRAPHWIRE - Core Module

Foundational pieces shared by the wiring engine:
- Unified error handling (error kinds with severity and trace recording)
- Async sequencing (ordered steps, slow-step watchdog)
- Event hooks (named callbacks used by children injection)

Each component here is free of dependencies on the ``di`` package, making
it the stable foundation the container and the service locator build upon.

Usage:
    from core import InvalidConfigError, all_in_order, EventEmitter

    results = await all_in_order([lambda: db.connect(), lambda: cache.warm_up()])
"""

from core.errors import (
    ContainerError,
    EntryNotFoundError,
    ErrorContext,
    ErrorSeverity,
    GraphwireError,
    InvalidConfigError,
    NotInstantiableError,
)
from core.async_utils import (
    AsyncStep,
    SequenceConfig,
    all_in_order,
    warn_after,
)
from core.events import EventEmitter

__all__ = [
    # Errors
    "GraphwireError",
    "ContainerError",
    "InvalidConfigError",
    "NotInstantiableError",
    "EntryNotFoundError",
    "ErrorContext",
    "ErrorSeverity",
    # Async utilities
    "AsyncStep",
    "SequenceConfig",
    "all_in_order",
    "warn_after",
    # Events
    "EventEmitter",
]
