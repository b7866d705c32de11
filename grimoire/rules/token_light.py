"""
grimoire/rules/token_light.py -- Add or change the light emitted by a token.

Source shape::

    {"key": "TokenLight", "value": {"dim": 40, "bright": "@item.data.radius"}}
"""

from __future__ import annotations

from pydantic import ValidationError

from grimoire.models import LightData
from grimoire.models.base import humanize_pydantic_error
from grimoire.rules.base import RuleElement
from grimoire.utils import deep_clone


class TokenLightRuleElement(RuleElement):
    key = "TokenLight"
    schema = {
        "type": "object",
        "required": ["value"],
        "properties": {"value": {"type": "object"}},
    }

    def validate_data(self) -> None:
        light = self.data["value"]
        for key in ("dim", "bright"):
            if light.get(key) is not None:
                resolved = self.resolve_value(light[key])
                if isinstance(resolved, (int, float)) and not isinstance(resolved, bool):
                    light[key] = resolved
            # pydantic's lax float would accept true/false as 1/0
            if isinstance(light.get(key), bool):
                self.fail_validation(f"Field '{key}' must be a number, got {light[key]!r}")
                return

        try:
            LightData.model_validate(light)
        except ValidationError as exc:
            self.fail_validation("; ".join(humanize_pydantic_error(err) for err in exc.errors()))

    def after_prepare_data(self) -> None:
        if not self.test():
            return
        self.actor.synthetics.token_overrides["light"] = deep_clone(self.data["value"])
