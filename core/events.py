"""
GRAPHWIRE - Event Hooks

Minimal synchronous event emitter. Objects that take part in children
injection mix this in to expose ``on`` / ``emit`` / ``remove_all_listeners``.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, DefaultDict, List, Optional

from observability.logging import get_logger

logger = get_logger(__name__)

Listener = Callable[..., Any]


class EventEmitter:
    """
    Named-hook callback registry.

    Usage:
        emitter = EventEmitter()
        emitter.on("ready", lambda payload: print(payload))
        emitter.emit("ready", {"ok": True})
    """

    def _listeners_map(self) -> DefaultDict[str, List[Listener]]:
        # Created lazily so subclasses need not call super().__init__()
        try:
            return self.__dict__["_event_listeners"]
        except KeyError:
            listeners: DefaultDict[str, List[Listener]] = defaultdict(list)
            self.__dict__["_event_listeners"] = listeners
            return listeners

    def on(self, event: str, listener: Listener) -> "EventEmitter":
        """Register ``listener`` under ``event``."""
        self._listeners_map()[event].append(listener)
        return self

    def listeners(self, event: str) -> List[Listener]:
        """Snapshot of listeners registered under ``event``."""
        return list(self._listeners_map().get(event, []))

    def remove_all_listeners(self, event: Optional[str] = None) -> "EventEmitter":
        """Drop listeners of ``event``, or of every event when ``None``."""
        listeners = self._listeners_map()
        if event is None:
            listeners.clear()
        else:
            listeners.pop(event, None)
        return self

    def emit(self, event: str, *args: Any) -> int:
        """Invoke every listener of ``event`` in registration order."""
        called = 0
        for listener in self.listeners(event):
            listener(*args)
            called += 1
        if called:
            logger.debug("Event emitted", hook=event, listeners=called)
        return called
