"""
grimoire/models/light.py -- Host schema for light emitted by a token.

Rule elements that change a token's light must produce a payload this
model accepts; anything it rejects suppresses the rule for the cycle.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class LightAnimation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: str | None = None
    speed: int = Field(default=5, ge=0, le=10)
    intensity: int = Field(default=5, ge=1, le=10)
    reverse: bool = False


class LightData(BaseModel):
    """A (possibly partial) light source descriptor."""

    model_config = ConfigDict(extra="forbid")

    dim: float | None = Field(default=None, ge=0)
    bright: float | None = Field(default=None, ge=0)
    angle: float = Field(default=360, gt=0, le=360)
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    alpha: float = Field(default=0.5, ge=0, le=1)
    coloration: int = Field(default=1, ge=0)
    luminosity: float = Field(default=0.5, ge=-1, le=1)
    attenuation: float = Field(default=0.5, ge=0, le=1)
    shadows: float = Field(default=0, ge=0, le=1)
    darkness: dict[Literal["min", "max"], float] | None = None
    animation: LightAnimation | None = None

