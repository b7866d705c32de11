"""
grimoire_app/services/event_bus.py -- Application-wide event bus using Qt signals.

Singleton that provides typed signals for sheet and error notifications.
Widgets connect to the EventBus rather than to the engine, keeping the
engine free of Qt.

Usage::

    from grimoire_app.services.event_bus import EventBus

    bus = EventBus.instance()
    bus.sheet_rendered.connect(my_handler)
"""

from __future__ import annotations

import threading

from PySide6.QtCore import QObject, Signal


class EventBus(QObject):
    """Application-wide signal bus.

    Signals
    -------
    sheet_rendered(str)
        A document's sheet was opened.  Payload is the document id.
    sheet_refreshed(str)
        An open sheet must redraw from its document.  Payload is the id.
    sheet_closed(str)
        A sheet was closed.  Payload is the document id.
    error_occurred(str)
        An error needs to be shown to the user.
    """

    sheet_rendered = Signal(str)
    sheet_refreshed = Signal(str)
    sheet_closed = Signal(str)

    error_occurred = Signal(str)

    # Singleton
    _instance: EventBus | None = None
    _lock = threading.Lock()

    @classmethod
    def instance(cls) -> EventBus:
        """Return the singleton EventBus instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        with cls._lock:
            if cls._instance is not None:
                cls._instance.deleteLater()
            cls._instance = None
