"""
Tests for core/events.py - Event Hooks.
"""
from unittest.mock import Mock

from core.events import EventEmitter


class Widget(EventEmitter):
    def __init__(self, name):
        self.name = name


class TestEventEmitter:
    """Tests for named-hook callbacks."""

    def test_emit_calls_listeners_in_order(self):
        """Test registration order is call order."""
        emitter = EventEmitter()
        calls = []
        emitter.on("ready", lambda payload: calls.append(("first", payload)))
        emitter.on("ready", lambda payload: calls.append(("second", payload)))

        called = emitter.emit("ready", 1)

        assert called == 2
        assert calls == [("first", 1), ("second", 1)]

    def test_emit_without_listeners(self):
        """Test emitting an unknown event is a no-op."""
        assert EventEmitter().emit("nothing") == 0

    def test_on_returns_emitter(self):
        """Test chaining."""
        emitter = EventEmitter()

        assert emitter.on("a", Mock()) is emitter

    def test_remove_all_listeners_for_event(self):
        """Test removing one event's listeners."""
        emitter = EventEmitter()
        kept = Mock()
        emitter.on("a", Mock())
        emitter.on("b", kept)

        emitter.remove_all_listeners("a")
        emitter.emit("b")

        assert emitter.listeners("a") == []
        kept.assert_called_once_with()

    def test_remove_all_listeners(self):
        """Test removing every listener."""
        emitter = EventEmitter()
        emitter.on("a", Mock())
        emitter.on("b", Mock())

        emitter.remove_all_listeners()

        assert emitter.listeners("a") == []
        assert emitter.listeners("b") == []

    def test_subclass_without_super_init(self):
        """Test the listener map is created lazily."""
        widget = Widget("w")
        listener = Mock()

        widget.on("changed", listener)
        widget.emit("changed", widget.name)

        listener.assert_called_once_with("w")

    def test_listeners_snapshot(self):
        """Test the returned list is a copy."""
        emitter = EventEmitter()
        emitter.on("a", Mock())

        emitter.listeners("a").clear()

        assert len(emitter.listeners("a")) == 1
