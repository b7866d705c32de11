"""
grimoire -- Layered spell overlays and rule elements.

Submodules:
    diff          Structural diff and patch of JSON-like documents.
    items         Item and Spell documents.
    overlays      OverlayStore: a spell's override records.
    variants      Variant materialization from overlay records.
    persistence   Document backends (in-memory, JSON file).
    actor         Actor and the rule element preparation cycle.
    rules         Rule element registry and kinds.
    models        Pydantic source models.
    errors        Exception types.
"""

from grimoire.actor import Actor, PreparationCycle, Synthetics
from grimoire.diff import apply_patch, diff_object
from grimoire.items import Item, Spell
from grimoire.overlays import OverlayStore
from grimoire.variants import materialize

__all__ = [
    "Actor",
    "Item",
    "OverlayStore",
    "PreparationCycle",
    "Spell",
    "Synthetics",
    "apply_patch",
    "diff_object",
    "materialize",
]
