"""
grimoire/overlays.py -- Ordered collection of a spell's overlay records.

Records live on the spell at ``data.overlays`` as ``{id: record}``.  The
store is an insertion-ordered, read-only mapping over them; every change
goes through the spell's document backend and the spell reloads the
store from what was persisted.

Saving an edited variant stores only its difference from the base spell:

    1. apply the edits to the in-memory variant
    2. diff the variant against the base spell's source
    3. delete the old record, then write the diff under the same id

The two writes in step 3 (and in ``delete_overlay``) are not
transactional.  A caller that sees the second step fail should call
``reconcile()`` to rebuild the index from the persisted source.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from grimoire.diff import diff_object
from grimoire.errors import OverlayNotFoundError, UnsupportedOverlayKind
from grimoire.models import OverlayType, overlay_record_adapter
from grimoire.utils import deep_clone, random_id

if TYPE_CHECKING:
    from grimoire.items import Spell

logger = logging.getLogger(__name__)

OVERLAYS_PATH = "data.overlays"


class OverlayStore(Mapping):
    """Overlay records of one spell, keyed by overlay id.

    Parameters
    ----------
    spell : Spell
        The spell the records belong to.
    entries : dict, optional
        ``{id: record}`` as persisted.
    """

    def __init__(self, spell: Spell, entries: dict[str, dict[str, Any]] | None = None):
        self.spell = spell
        self._entries: dict[str, dict[str, Any]] = {}
        # Ids handed out or deleted during this store's lifetime; never reissued.
        self._retired: set[str] = set()
        self.reset(entries)

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, overlay_id: str) -> dict[str, Any]:
        try:
            return deep_clone(self._entries[overlay_id])
        except KeyError:
            raise OverlayNotFoundError(overlay_id, self._missing_message(overlay_id)) from None

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, overlay_id: object) -> bool:
        return overlay_id in self._entries

    # ------------------------------------------------------------------
    # Index maintenance
    # ------------------------------------------------------------------

    def reset(self, entries: dict[str, dict[str, Any]] | None) -> None:
        """Rebuild the index from persisted *entries*.

        Records that fail validation are left out of the index.
        """
        self._retired.update(self._entries)
        index: dict[str, dict[str, Any]] = {}
        for overlay_id, record in (entries or {}).items():
            try:
                overlay_record_adapter.validate_python(record)
            except ValidationError as exc:
                logger.warning(
                    "Ignoring invalid overlay %s on %r: %s",
                    overlay_id, self.spell, exc.errors()[0].get("msg", exc),
                )
                continue
            index[overlay_id] = deep_clone(record)
        self._entries = index

    def reconcile(self) -> None:
        """Re-derive the index from the spell's persisted source.

        Uses the backend's copy when there is one, otherwise the spell's
        own source.
        """
        spell = self.spell
        if spell.backend is not None:
            source = spell.backend.get(spell.id)
            entries = source.get("data", {}).get("overlays", {})
        else:
            entries = spell.system.get("overlays", {})
        self.reset(entries)

    def _missing_message(self, overlay_id: str) -> str:
        return f"Spell {self.spell.name} ({self.spell.id}) does not have an overlay with id: {overlay_id}"

    def _verify_overlay_id(self, overlay_id: str) -> None:
        if overlay_id not in self._entries:
            raise OverlayNotFoundError(overlay_id, self._missing_message(overlay_id))

    def _override_ids(self) -> list[str]:
        return [
            overlay_id for overlay_id, record in self._entries.items()
            if record.get("overlayType") == OverlayType.OVERRIDE.value
        ]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def override_variants(self) -> list[Spell]:
        """Return a variant for every override record that loads cleanly."""
        variants = []
        for overlay_id in self._override_ids():
            variant = self.spell.load_variant([overlay_id])
            if variant is not None:
                variants.append(variant)
        return variants

    def get_type(self, overlay_id: str) -> OverlayType:
        self._verify_overlay_id(overlay_id)
        return OverlayType(self._entries[overlay_id]["overlayType"])

    # ------------------------------------------------------------------
    # Changes
    # ------------------------------------------------------------------

    async def create(
        self,
        overlay_type: OverlayType | str,
        *,
        render_sheet: bool = False,
    ) -> str:
        """Persist a new, empty overlay of *overlay_type* and return its id.

        Only override overlays can be created; other kinds raise
        ``UnsupportedOverlayKind`` without touching the backend.
        """
        if overlay_type not in (OverlayType.OVERRIDE, OverlayType.OVERRIDE.value):
            raise UnsupportedOverlayKind(str(getattr(overlay_type, "value", overlay_type)))

        overlay_id = random_id(exclude=self._retired | set(self._entries))
        self._retired.add(overlay_id)
        record = {
            "_id": overlay_id,
            "sort": len(self._override_ids()) + 1,
            "overlayType": OverlayType.OVERRIDE.value,
        }
        await self.spell.update({f"{OVERLAYS_PATH}.{overlay_id}": record})
        logger.info("Created override overlay %s on %r", overlay_id, self.spell)

        if render_sheet and self.spell.presenter is not None:
            variant = self.spell.load_variant([overlay_id])
            if variant is not None:
                self.spell.presenter.render(variant)
        return overlay_id

    async def update_override(
        self,
        variant: Spell,
        edits: dict[str, Any],
        *,
        render: bool = True,
    ) -> Spell:
        """Apply *edits* to *variant* and save its diff against the spell.

        No write happens when the edits change nothing or the variant no
        longer differs from the spell.  Otherwise the override record is
        replaced wholesale by the new diff.
        """
        if not variant.applied_overlays:
            raise OverlayNotFoundError(variant.id, f"{variant!r} is not an overlay variant")
        overlay_id = variant.applied_overlays[-1]
        self._verify_overlay_id(overlay_id)

        if not variant.update_source(edits):
            return variant

        difference = diff_object(_without_overlays(self.spell), _without_overlays(variant))
        if not difference:
            return variant

        # overlayType never survives construction of the variant, and the
        # record must keep its id as long as it lives under that key.
        difference["overlayType"] = OverlayType.OVERRIDE.value
        difference["_id"] = overlay_id

        await self.spell.update({f"{OVERLAYS_PATH}.-={overlay_id}": None}, render=False)
        await self.spell.update({f"{OVERLAYS_PATH}.{overlay_id}": difference}, render=render)
        logger.debug("Saved override %s on %r: %s", overlay_id, self.spell, list(difference))

        presenter = variant.presenter
        if presenter is not None and presenter.is_rendered(variant):
            presenter.refresh(variant)
        return variant

    async def delete_overlay(self, overlay_id: str) -> None:
        """Delete an overlay from the spell's persisted source and the index."""
        self._verify_overlay_id(overlay_id)
        await self.spell.update({f"{OVERLAYS_PATH}.-={overlay_id}": None})
        self._entries.pop(overlay_id, None)
        self._retired.add(overlay_id)
        logger.info("Deleted overlay %s from %r", overlay_id, self.spell)


def _without_overlays(spell: Spell) -> dict[str, Any]:
    """Spell source minus its overlay map, which records never carry."""
    source = spell.to_object()
    source["data"].pop("overlays", None)
    return source
