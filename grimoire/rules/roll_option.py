"""
grimoire/rules/roll_option.py -- Set a roll option on the owning actor.

Source shape::

    {"key": "RollOption", "option": "light:torch", "domain": "all", "value": true}

Options set in the ``all`` domain join the actor's roll options, so the
predicates of rules evaluated later in the same cycle can see them.
"""

from __future__ import annotations

from grimoire.rules.base import RuleElement

DEFAULT_DOMAIN = "all"


class RollOptionRuleElement(RuleElement):
    key = "RollOption"
    schema = {
        "type": "object",
        "required": ["option"],
        "properties": {
            "option": {"type": "string", "minLength": 1},
            "domain": {"type": "string", "minLength": 1},
            "value": {"type": ["boolean", "string"]},
        },
    }

    def validate_data(self) -> None:
        value = self.resolve_value(self.data.get("value"), default=True)
        if not isinstance(value, bool):
            self.fail_validation(f"value must resolve to true or false, got {value!r}")
            return
        self.data["value"] = value

    @property
    def option(self) -> str:
        return self.data["option"]

    @property
    def domain(self) -> str:
        return self.data.get("domain", DEFAULT_DOMAIN)

    def before_prepare_data(self) -> None:
        if not self.test():
            return
        domain = self.actor.synthetics.roll_options.setdefault(self.domain, {})
        domain[self.option] = self.data["value"]
