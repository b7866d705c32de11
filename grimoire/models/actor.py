"""
grimoire/models/actor.py -- Actor source model.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActorLevel(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: int = Field(default=1, ge=0)


class ActorDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    level: ActorLevel = Field(default_factory=ActorLevel)


class ActorSystemData(BaseModel):
    model_config = ConfigDict(extra="allow")

    details: ActorDetails = Field(default_factory=ActorDetails)


class ActorSource(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(alias="_id", min_length=1)
    name: str = Field(min_length=1)
    type: str = "character"
    data: ActorSystemData = Field(default_factory=ActorSystemData)
    items: list[dict[str, Any]] = Field(default_factory=list)
