"""
grimoire_app/services/sheet_presenter.py -- Presenter backed by the event bus.

Implements the engine's presenter interface (``render``, ``refresh``,
``is_rendered``).  It tracks which documents have an open sheet and
announces changes on the ``EventBus``; the widgets listening there do
the drawing.
"""

from __future__ import annotations

import logging
from typing import Any

from grimoire_app.services.event_bus import EventBus

logger = logging.getLogger(__name__)


class SheetPresenter:
    """Keeps the set of open sheets, keyed by document id."""

    def __init__(self, bus: EventBus | None = None):
        self._bus = bus or EventBus.instance()
        self._open: dict[str, Any] = {}

    def render(self, document: Any) -> None:
        self._open[document.id] = document
        logger.debug("Rendering sheet for %r", document)
        self._bus.sheet_rendered.emit(document.id)

    def refresh(self, document: Any) -> None:
        if document.id not in self._open:
            return
        self._open[document.id] = document
        self._bus.sheet_refreshed.emit(document.id)

    def close(self, document: Any) -> None:
        if self._open.pop(document.id, None) is not None:
            self._bus.sheet_closed.emit(document.id)

    def is_rendered(self, document: Any) -> bool:
        return document.id in self._open

    def document(self, doc_id: str) -> Any | None:
        """The document currently shown by the sheet *doc_id*, if open."""
        return self._open.get(doc_id)
