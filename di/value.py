"""
GRAPHWIRE - Deferred Values

A ``Value`` wraps a callback that receives the container and returns the
actual value. It can be registered as a definition or placed inside
constructor params / config, where it is resolved at build time.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict

from core.errors import InvalidConfigError

if TYPE_CHECKING:
    from di.container import Container


class Value:
    """Value getter through a callback receiving the container."""

    def __init__(self, callback: Callable[["Container"], Any]):
        if not callable(callback):
            raise InvalidConfigError(
                f"Value callback must be callable, got {type(callback).__name__}"
            )
        self.callback = callback

    @classmethod
    def of(cls, callback: Callable[["Container"], Any]) -> "Value":
        return cls(callback)

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "Value":
        """Restore a Value from its exported attribute map."""
        if "callback" not in state:
            raise InvalidConfigError(
                'Failed to instantiate Value. Required parameter "callback" is missing'
            )
        return cls(state["callback"])

    def resolve(self, container: "Container") -> Any:
        return self.callback(container)

    def __repr__(self) -> str:
        return f"Value({self.callback!r})"
