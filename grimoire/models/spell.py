"""
grimoire/models/spell.py -- Spell source model and overlay records.

Overlay records are tagged by ``overlayType``.  They are validated with a
discriminated union when a spell is loaded but kept on the spell exactly
as persisted: a record is a partial spell source plus bookkeeping, and
default-filling it would change what a variant inherits from the base.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from grimoire.models.base import ItemSource, ItemSystemData

MAX_SPELL_LEVEL = 10


class OverlayType(str, Enum):
    OVERRIDE = "override"
    HEIGHTEN = "heighten"


class _OverlayRecordBase(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(alias="_id", min_length=1)
    sort: int | None = None


class OverrideOverlay(_OverlayRecordBase):
    """Partial spell source that replaces fields of the base spell."""

    overlayType: Literal["override"]


class HeightenOverlay(_OverlayRecordBase):
    """Fields that apply when the spell is cast at ``level`` or higher."""

    overlayType: Literal["heighten"]
    level: int = Field(ge=1, le=MAX_SPELL_LEVEL)


OverlayRecord = Annotated[
    Union[OverrideOverlay, HeightenOverlay],
    Field(discriminator="overlayType"),
]

overlay_record_adapter: TypeAdapter = TypeAdapter(OverlayRecord)


class LevelValue(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: int = Field(ge=1, le=MAX_SPELL_LEVEL)


class SpellArea(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["burst", "cone", "emanation", "line"]
    value: int = Field(ge=0)


class DamagePartial(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: str
    type: str = "untyped"


class SpellSystemData(ItemSystemData):
    level: LevelValue
    traditions: dict[str, Any] = Field(default_factory=lambda: {"value": []})
    time: dict[str, Any] = Field(default_factory=lambda: {"value": ""})
    range: dict[str, Any] = Field(default_factory=lambda: {"value": ""})
    area: SpellArea | None = None
    damage: dict[str, dict[str, DamagePartial]] = Field(
        default_factory=lambda: {"value": {}}
    )
    overlays: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @field_validator("overlays", mode="before")
    @classmethod
    def _overlay_map(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("overlays must be a mapping of id to record")
        for key, record in value.items():
            if isinstance(record, dict) and record.get("_id") not in (None, key):
                raise ValueError(
                    f"overlay record '{key}' has mismatched _id '{record.get('_id')}'"
                )
        return value


class SpellSource(ItemSource):
    type: Literal["spell"] = "spell"
    data: SpellSystemData
