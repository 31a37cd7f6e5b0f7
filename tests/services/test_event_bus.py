"""Unit tests for EventBus."""

import logging
from unittest.mock import MagicMock

import pytest

from book_reader.services import EventBus


@pytest.fixture
def bus():
    return EventBus()


class TestEventBusDispatch:
    def test_emit_passes_data(self, bus):
        callback = MagicMock()
        bus.on("relocate", callback)
        bus.emit("relocate", "cfi")
        callback.assert_called_once_with("cfi")

    def test_emit_without_data_calls_with_no_arguments(self, bus):
        callback = MagicMock()
        bus.on("ready", callback)
        bus.emit("ready")
        callback.assert_called_once_with()

    def test_emit_with_no_listeners_is_safe(self, bus):
        bus.emit("nothing", "data")

    def test_listeners_run_in_registration_order(self, bus):
        order = []
        bus.on("ready", lambda: order.append("first"))
        bus.on("ready", lambda: order.append("second"))
        bus.on("ready", lambda: order.append("third"))
        bus.emit("ready")
        assert order == ["first", "second", "third"]

    def test_events_do_not_leak_into_each_other(self, bus):
        ready = MagicMock()
        error = MagicMock()
        bus.on("ready", ready)
        bus.on("error", error)
        bus.emit("ready")
        ready.assert_called_once()
        error.assert_not_called()

    def test_duplicate_registration_runs_twice(self, bus):
        callback = MagicMock()
        bus.on("ready", callback)
        bus.on("ready", callback)
        bus.emit("ready")
        assert callback.call_count == 2


class TestEventBusRemoval:
    def test_off_stops_delivery(self, bus):
        callback = MagicMock()
        bus.on("testEvent", callback)
        bus.emit("testEvent", "testData")
        bus.off("testEvent", callback)
        bus.emit("testEvent", "moreData")
        callback.assert_called_once_with("testData")

    def test_off_removes_one_registration_at_a_time(self, bus):
        callback = MagicMock()
        bus.on("ready", callback)
        bus.on("ready", callback)
        bus.off("ready", callback)
        bus.emit("ready")
        assert callback.call_count == 1
        bus.off("ready", callback)
        bus.emit("ready")
        assert callback.call_count == 1

    def test_off_unknown_event_or_callback_is_noop(self, bus):
        bus.off("missing", MagicMock())
        bus.on("ready", MagicMock())
        bus.off("ready", MagicMock())
        assert bus.listener_count("ready") == 1

    def test_off_matches_bound_methods(self, bus):
        class Listener:
            def __init__(self):
                self.calls = 0

            def handle(self):
                self.calls += 1

        listener = Listener()
        bus.on("ready", listener.handle)
        bus.off("ready", listener.handle)
        bus.emit("ready")
        assert listener.calls == 0

    def test_off_keeps_other_callbacks(self, bus):
        first, second = MagicMock(), MagicMock()
        bus.on("ready", first)
        bus.on("ready", second)
        bus.off("ready", first)
        bus.emit("ready")
        first.assert_not_called()
        second.assert_called_once()


class TestEventBusFaultIsolation:
    def test_raising_listener_does_not_stop_others(self, bus):
        after = MagicMock()
        bus.on("ready", MagicMock(side_effect=RuntimeError("boom")))
        bus.on("ready", after)
        bus.emit("ready")
        after.assert_called_once()

    def test_raising_listener_is_logged(self, caplog):
        bus = EventBus(logger=logging.getLogger("test.bus"))
        bus.on("error", MagicMock(side_effect=ValueError("bad")))
        with caplog.at_level(logging.ERROR, logger="test.bus"):
            bus.emit("error", "payload")
        assert "Listener 0 for event 'error' raised" in caplog.text

    def test_listener_can_unsubscribe_during_emit(self, bus):
        calls = []

        def once():
            calls.append("once")
            bus.off("ready", once)

        bus.on("ready", once)
        bus.on("ready", lambda: calls.append("other"))
        bus.emit("ready")
        bus.emit("ready")
        assert calls == ["once", "other", "other"]

    def test_clear_removes_everything(self, bus):
        callback = MagicMock()
        bus.on("ready", callback)
        bus.clear()
        bus.emit("ready")
        callback.assert_not_called()
        assert bus.listener_count("ready") == 0
