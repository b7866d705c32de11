"""
Tests for grimoire_app/services/event_bus.py -- EventBus singleton and signals.
"""

import threading
from unittest.mock import MagicMock

import pytest

from grimoire_app.services.event_bus import EventBus


@pytest.fixture(autouse=True)
def _reset_event_bus():
    """Ensure each test starts with a fresh EventBus."""
    EventBus.reset()
    yield
    EventBus.reset()


# ------------------------------------------------------------------
# Singleton tests
# ------------------------------------------------------------------


class TestSingletonPattern:
    def test_instance_returns_same_object(self, qapp):
        bus1 = EventBus.instance()
        bus2 = EventBus.instance()
        assert bus1 is bus2

    def test_reset_clears_instance(self, qapp):
        bus1 = EventBus.instance()
        EventBus.reset()
        bus2 = EventBus.instance()
        assert bus1 is not bus2

    def test_thread_safe_creation(self, qapp):
        """Multiple threads racing to create the instance should all get the same object."""
        results = []
        barrier = threading.Barrier(4)

        def _grab():
            barrier.wait()
            results.append(id(EventBus.instance()))

        threads = [threading.Thread(target=_grab) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(results)) == 1, "All threads should get the same instance"


# ------------------------------------------------------------------
# Signal tests
# ------------------------------------------------------------------


class TestSignals:
    @pytest.mark.parametrize("signal_name", [
        "sheet_rendered",
        "sheet_refreshed",
        "sheet_closed",
        "error_occurred",
    ])
    def test_signal_delivers_payload(self, qapp, signal_name):
        bus = EventBus.instance()
        receiver = MagicMock()
        getattr(bus, signal_name).connect(receiver)
        getattr(bus, signal_name).emit("fireballSpell001")
        receiver.assert_called_once_with("fireballSpell001")

    def test_multiple_receivers(self, qapp):
        bus = EventBus.instance()
        first, second = MagicMock(), MagicMock()
        bus.sheet_rendered.connect(first)
        bus.sheet_rendered.connect(second)
        bus.sheet_rendered.emit("abc")
        first.assert_called_once_with("abc")
        second.assert_called_once_with("abc")

    def test_reset_bus_does_not_deliver_to_new_instance(self, qapp):
        old_bus = EventBus.instance()
        receiver = MagicMock()
        old_bus.sheet_closed.connect(receiver)
        EventBus.reset()
        EventBus.instance().sheet_closed.emit("abc")
        receiver.assert_not_called()
