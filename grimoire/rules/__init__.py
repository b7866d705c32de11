"""
grimoire/rules/ -- Rule elements: data-driven effects attached to items.

Submodules:
    base          RuleElement base class and RuleState.
    predicate     Roll-option predicates.
    resolve       Value resolution for payload references.
    token_light   TokenLight kind.
    roll_option   RollOption kind.

Kinds are looked up by the ``key`` of each source entry in a
``RuleElementRegistry``.  The module-level ``rule_elements`` registry
knows every built-in kind; new kinds are added with ``register``::

    from grimoire.rules import rule_elements

    rule_elements.register("MyKind", MyKindRuleElement)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from grimoire.rules.base import RuleElement, RuleState
from grimoire.rules.predicate import Predicate
from grimoire.rules.resolve import DefaultValueResolver, ValueResolver
from grimoire.rules.roll_option import RollOptionRuleElement
from grimoire.rules.token_light import TokenLightRuleElement

if TYPE_CHECKING:
    from grimoire.items import Item

logger = logging.getLogger(__name__)


class RuleElementRegistry:
    """Maps rule element keys to the classes that implement them."""

    def __init__(self):
        self._kinds: dict[str, type[RuleElement]] = {}

    def register(self, key: str, cls: type[RuleElement]) -> None:
        if not key:
            raise ValueError("Rule element key must be a non-empty string")
        if key in self._kinds and self._kinds[key] is not cls:
            logger.info("Replacing rule element %s: %s -> %s", key, self._kinds[key].__name__, cls.__name__)
        self._kinds[key] = cls

    def get(self, key: str) -> type[RuleElement] | None:
        return self._kinds.get(key)

    def keys(self) -> list[str]:
        return list(self._kinds)

    def __contains__(self, key: object) -> bool:
        return key in self._kinds

    def from_source(
        self,
        source: dict[str, Any],
        item: Item,
        *,
        resolver: ValueResolver | None = None,
    ) -> RuleElement | None:
        """Build the rule element for *source*, or ``None`` for an unknown key.

        ``RuleConstructionError`` from the constructor propagates.
        """
        key = source.get("key") if isinstance(source, dict) else None
        cls = self._kinds.get(key) if isinstance(key, str) else None
        if cls is None:
            logger.warning("Unrecognized rule element %r on %r; skipping", key, item)
            return None
        return cls(source, item, resolver=resolver)

    def from_owned_item(
        self,
        item: Item,
        *,
        resolver: ValueResolver | None = None,
    ) -> list[RuleElement]:
        """Build every rule element in *item*'s ``data.rules``."""
        rules = []
        for source in item.rule_sources:
            rule = self.from_source(source, item, resolver=resolver)
            if rule is not None:
                rules.append(rule)
        return rules


rule_elements = RuleElementRegistry()
rule_elements.register(TokenLightRuleElement.key, TokenLightRuleElement)
rule_elements.register(RollOptionRuleElement.key, RollOptionRuleElement)

__all__ = [
    "DefaultValueResolver",
    "Predicate",
    "RollOptionRuleElement",
    "RuleElement",
    "RuleElementRegistry",
    "RuleState",
    "TokenLightRuleElement",
    "ValueResolver",
    "rule_elements",
]
