"""
grimoire/models/ -- Pydantic v2 source models for grimoire documents.

Submodules:
    base    ItemSource and the shared validate_source() helper.
    spell   SpellSource and the tagged overlay record union.
    light   LightData, the host schema for token light.
    actor   ActorSource.
"""

from grimoire.models.actor import ActorSource
from grimoire.models.base import ItemSource, validate_source
from grimoire.models.light import LightData
from grimoire.models.spell import (
    HeightenOverlay,
    OverlayType,
    OverrideOverlay,
    SpellSource,
    overlay_record_adapter,
)

__all__ = [
    "ActorSource",
    "HeightenOverlay",
    "ItemSource",
    "LightData",
    "OverlayType",
    "OverrideOverlay",
    "SpellSource",
    "overlay_record_adapter",
    "validate_source",
]
