"""
grimoire/items.py -- Items and spells, the base entities of the engine.

An ``Item`` wraps a validated source dict.  It is changed in two ways:

    update_source()   in-memory only; used on transient copies such as
                      spell variants before they are diffed.
    update()          persisted through the document backend; the item
                      reloads its source from what the backend returns.

A ``Spell`` additionally owns an ``OverlayStore`` and can load variants
of itself from its overlays.

Usage::

    from grimoire.items import Spell

    spell = Spell(source, backend=backend)
    overlay_id = await spell.overlays.create("override")
    variant = spell.load_variant([overlay_id])
    await spell.overlays.update_override(variant, {"name": "Fireball (Big)"})
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Any, Protocol

from grimoire.diff import diff_object, merge_object
from grimoire.errors import PersistenceError
from grimoire.models import ItemSource, SpellSource, validate_source
from grimoire.overlays import OverlayStore
from grimoire.utils import deep_clone, expand_object, slugify
from grimoire.variants import materialize

if TYPE_CHECKING:
    from grimoire.actor import Actor
    from grimoire.persistence import DocumentBackend

logger = logging.getLogger(__name__)


class Presenter(Protocol):
    """Presentation collaborator: sheets for documents, fire-and-forget."""

    def render(self, document: Any) -> None: ...

    def refresh(self, document: Any) -> None: ...

    def is_rendered(self, document: Any) -> bool: ...


class Item:
    """A document owned (optionally) by an actor.

    Parameters
    ----------
    source : dict
        The persisted source.  Validated with ``source_model``; a failure
        raises ``DocumentValidationError``.
    actor : Actor, optional
        Owning actor.  Only a weak reference is kept.
    backend : DocumentBackend, optional
        Where ``update()`` writes.
    presenter : Presenter, optional
        Sheet renderer used after persisted updates.
    """

    source_model: type[ItemSource] = ItemSource

    def __init__(
        self,
        source: dict[str, Any],
        *,
        actor: Actor | None = None,
        backend: DocumentBackend | None = None,
        presenter: Presenter | None = None,
    ):
        self._actor_ref = weakref.ref(actor) if actor is not None else None
        self.backend = backend
        self.presenter = presenter
        self._source: dict[str, Any] = self._validate(source)
        self.prepare_data()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} ({self.id})>"

    def _validate(self, source: dict[str, Any]) -> dict[str, Any]:
        return validate_source(self.source_model, source).to_source()

    # ------------------------------------------------------------------
    # Source access
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._source["_id"]

    @property
    def name(self) -> str:
        return self._source["name"]

    @property
    def type(self) -> str:
        return self._source["type"]

    @property
    def sort(self) -> int:
        return self._source["sort"]

    @property
    def system(self) -> dict[str, Any]:
        """The ``data`` block of the source (read-only by convention)."""
        return self._source["data"]

    @property
    def slug(self) -> str:
        return self.system.get("slug") or slugify(self.name)

    @property
    def actor(self) -> Actor | None:
        return self._actor_ref() if self._actor_ref is not None else None

    @property
    def rule_sources(self) -> list[dict[str, Any]]:
        return self.system.get("rules", [])

    @property
    def sheet_rendered(self) -> bool:
        return self.presenter is not None and self.presenter.is_rendered(self)

    def to_object(self) -> dict[str, Any]:
        """Return a deep copy of the item's source."""
        return deep_clone(self._source)

    # ------------------------------------------------------------------
    # Changes
    # ------------------------------------------------------------------

    def prepare_data(self) -> None:
        """Derive runtime state from the source.  Called on every reload."""

    def update_source(self, changes: dict[str, Any]) -> dict[str, Any]:
        """Apply *changes* (dotted paths allowed) in memory only.

        The merged source is validated before it replaces the current one.
        Returns the diff between the old and new source.
        """
        before = self._source
        after = self._validate(merge_object(deep_clone(before), expand_object(changes)))
        self._source = after
        self.prepare_data()
        return diff_object(before, after)

    async def update(self, changes: dict[str, Any], *, render: bool = True) -> Item:
        """Persist *changes* through the backend, reload from its result and
        return the item."""
        if self.backend is None:
            raise PersistenceError(f"{self!r} has no document backend to write to")
        source = await self.backend.update(self.id, changes, render=render)
        self._source = self._validate(source)
        self.prepare_data()
        if render and self.sheet_rendered:
            self.presenter.refresh(self)
        return self


class Spell(Item):
    """A spell: the base entity that overlays customize.

    Extra parameters
    ----------------
    original : Spell, optional
        Set on variants: the spell the variant was derived from (weak).
    applied_overlays : list of str, optional
        Overlay ids merged into this variant, in order.
    """

    source_model = SpellSource

    def __init__(
        self,
        source: dict[str, Any],
        *,
        original: Spell | None = None,
        applied_overlays: list[str] | None = None,
        **kwargs,
    ):
        self._original_ref = weakref.ref(original) if original is not None else None
        self.applied_overlays: list[str] = list(applied_overlays or [])
        self.overlays: OverlayStore | None = None
        super().__init__(source, **kwargs)

    @property
    def level(self) -> int:
        return self.system["level"]["value"]

    @property
    def original(self) -> Spell | None:
        return self._original_ref() if self._original_ref is not None else None

    @property
    def is_variant(self) -> bool:
        return self._original_ref is not None

    def prepare_data(self) -> None:
        entries = self.system.get("overlays", {})
        if self.overlays is None:
            self.overlays = OverlayStore(self, entries)
        else:
            self.overlays.reset(entries)

    def load_variant(self, overlay_ids: list[str]) -> Spell | None:
        """Build a variant of this spell from *overlay_ids* (later ids win).

        Returns ``None`` if an id is unknown or the result is not a valid
        spell.
        """
        return materialize(self, overlay_ids)

    async def update(self, changes: dict[str, Any], *, render: bool = True) -> Spell:
        """Persist *changes* and return this spell.  On a variant, the
        changes are saved as an override diff on the original spell instead."""
        if self.is_variant:
            original = self.original
            if original is None:
                raise PersistenceError(f"{self!r} outlived the spell it was derived from")
            return await original.overlays.update_override(self, changes, render=render)
        return await super().update(changes, render=render)
