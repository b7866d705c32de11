"""
grimoire/persistence.py -- Document persistence backends.

The engine never writes documents itself.  It hands dotted-path partial
updates to a backend, which applies them and returns the new source::

    await backend.update("spell-id", {"data.overlays.abc": {...}})
    await backend.update("spell-id", {"data.overlays.-=abc": None})

A key whose last segment starts with ``-=`` deletes that key.  The
``render`` flag is passed through for the caller's presentation layer;
backends only record it.

Two backends are provided:

    InMemoryBackend   documents held in a dict; every call is recorded
                      in ``calls`` so callers can audit write counts.
    JsonFileBackend   the same, flushed to one JSON file after each
                      update with an atomic replace.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from grimoire.diff import merge_object
from grimoire.errors import PersistenceError
from grimoire.utils import deep_clone, expand_object, safe_read_json, safe_write_json

logger = logging.getLogger(__name__)


class DocumentBackend(Protocol):
    """What the engine needs from a persistence layer."""

    def get(self, doc_id: str) -> dict[str, Any]: ...

    async def update(
        self,
        doc_id: str,
        changes: dict[str, Any],
        *,
        render: bool = True,
    ) -> dict[str, Any]: ...


@dataclass
class UpdateCall:
    """One recorded call to ``update``."""
    doc_id: str
    changes: dict[str, Any]
    render: bool


class InMemoryBackend:
    """Keeps documents in memory, keyed by ``_id``.

    Parameters
    ----------
    documents : iterable of dict, optional
        Initial document sources.  Each must carry an ``_id``.
    """

    def __init__(self, documents=None):
        self.documents: dict[str, dict[str, Any]] = {}
        self.calls: list[UpdateCall] = []
        for source in documents or ():
            self.documents[source["_id"]] = deep_clone(source)

    def add(self, source: dict[str, Any]) -> dict[str, Any]:
        """Store a new document and return a copy of it."""
        doc_id = source.get("_id")
        if not doc_id:
            raise PersistenceError("Cannot store a document without an _id")
        documents = dict(self.documents)
        documents[doc_id] = deep_clone(source)
        self._write(documents)
        self.documents = documents
        return deep_clone(source)

    def get(self, doc_id: str) -> dict[str, Any]:
        try:
            return deep_clone(self.documents[doc_id])
        except KeyError:
            raise PersistenceError(f"No document with id '{doc_id}'") from None

    async def update(
        self,
        doc_id: str,
        changes: dict[str, Any],
        *,
        render: bool = True,
    ) -> dict[str, Any]:
        """Apply *changes* to document *doc_id* and return its new source.

        The update is applied to a copy and only committed once the
        backend has stored it, so a failed write leaves the previous
        version in place.
        """
        self.calls.append(UpdateCall(doc_id, deep_clone(changes), render))
        if doc_id not in self.documents:
            raise PersistenceError(f"No document with id '{doc_id}'")

        logger.debug("Updating %s with %s", doc_id, list(changes))
        updated = merge_object(deep_clone(self.documents[doc_id]), expand_object(changes))
        documents = dict(self.documents)
        documents[doc_id] = updated
        await self._flush(documents)
        self.documents = documents
        return deep_clone(updated)

    async def _flush(self, documents: dict[str, dict[str, Any]]) -> None:
        """Store *documents*; in-memory storage has nothing to do."""

    def _write(self, documents: dict[str, dict[str, Any]]) -> None:
        """Synchronous counterpart of ``_flush`` used by ``add``."""


class JsonFileBackend(InMemoryBackend):
    """In-memory backend mirrored to a JSON file ``{_id: source}``.

    Parameters
    ----------
    path : str or pathlib.Path
        File to load from (if it exists) and write to.
    """

    def __init__(self, path):
        self.path = Path(path)
        stored = safe_read_json(self.path, default={})
        if not isinstance(stored, dict):
            raise PersistenceError(f"{self.path} does not hold a document mapping")
        super().__init__(stored.values())

    async def _flush(self, documents: dict[str, dict[str, Any]]) -> None:
        await asyncio.to_thread(self._write, documents)

    def _write(self, documents: dict[str, dict[str, Any]]) -> None:
        try:
            safe_write_json(self.path, documents)
        except OSError as exc:
            raise PersistenceError(f"Could not write {self.path}: {exc}") from exc
