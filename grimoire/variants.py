"""
grimoire/variants.py -- Build in-memory spell variants from overlay records.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from grimoire.diff import merge_object
from grimoire.errors import DocumentValidationError

if TYPE_CHECKING:
    from grimoire.items import Spell

logger = logging.getLogger(__name__)


def materialize(base: Spell, overlay_ids: list[str]) -> Spell | None:
    """Merge the records for *overlay_ids* onto a copy of *base*'s source.

    Records are applied in the given order, so later ids win on fields
    they both set.  The variant is the same class as *base*, shares its
    actor, backend and presenter, and refers back to *base* weakly.  Its
    id is the last applied overlay's id.

    Returns ``None`` when an id is unknown or the merged source fails the
    spell's validation.
    """
    if not overlay_ids:
        logger.debug("No overlays requested for %r", base)
        return None

    source = base.to_object()
    for overlay_id in overlay_ids:
        record = base.overlays.get(overlay_id)
        if record is None:
            logger.debug("Overlay %s missing on %r; no variant", overlay_id, base)
            return None
        merge_object(source, record)

    try:
        return type(base)(
            source,
            actor=base.actor,
            backend=base.backend,
            presenter=base.presenter,
            original=base,
            applied_overlays=overlay_ids,
        )
    except DocumentValidationError as exc:
        logger.debug("Variant %s of %r is invalid: %s", overlay_ids, base, exc)
        return None
