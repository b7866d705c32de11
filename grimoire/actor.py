"""
grimoire/actor.py -- Actors and the rule element preparation cycle.

``Actor.prepare_data()`` derives the actor's transient state from its
persisted source.  Each call is one cycle:

    1. start a fresh ``Synthetics`` bag
    2. build every rule element of every owned item from source
    3. run ``before_prepare_data`` on the active rules, by priority
    4. run ``after_prepare_data`` on the active rules, by priority

Rule elements write only into the current cycle's bag, always as copies,
so a ``PreparationCycle`` returned earlier never changes afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from grimoire.items import Item, Spell
from grimoire.models import ActorSource, validate_source
from grimoire.rules import DefaultValueResolver, RuleElementRegistry, RuleState, rule_elements
from grimoire.utils import deep_clone

if TYPE_CHECKING:
    from grimoire.items import Presenter
    from grimoire.persistence import DocumentBackend
    from grimoire.rules import RuleElement, ValueResolver

logger = logging.getLogger(__name__)

ITEM_CLASSES: dict[str, type[Item]] = {"spell": Spell}


@dataclass
class Synthetics:
    """Transient values derived from rule elements during one cycle."""
    token_overrides: dict[str, Any] = field(default_factory=dict)
    roll_options: dict[str, dict[str, bool]] = field(default_factory=dict)


@dataclass
class PreparationCycle:
    """Outcome of one ``Actor.prepare_data()`` call."""
    number: int
    rules: list[RuleElement]
    synthetics: Synthetics

    @property
    def active(self) -> list[RuleElement]:
        return [r for r in self.rules if r.state is RuleState.ACTIVE]

    @property
    def suppressed(self) -> list[RuleElement]:
        return [r for r in self.rules if r.state is RuleState.SUPPRESSED]

    @property
    def failures(self) -> dict[str, str]:
        """Failure message per suppressed rule label (ignored rules excluded)."""
        return {r.label: str(r.failure) for r in self.rules if r.failure is not None}


class Actor:
    """A creature owning items whose rule elements shape its derived state.

    Parameters
    ----------
    source : dict
        Persisted actor source including embedded ``items``.
    backend, presenter
        Passed on to owned items.
    registry : RuleElementRegistry, optional
        Rule element kinds; defaults to the built-in registry.
    resolver : ValueResolver, optional
        Value resolution for rule payloads.
    """

    def __init__(
        self,
        source: dict[str, Any],
        *,
        backend: DocumentBackend | None = None,
        presenter: Presenter | None = None,
        registry: RuleElementRegistry | None = None,
        resolver: ValueResolver | None = None,
    ):
        model = validate_source(ActorSource, source)
        self._source = model.model_dump(by_alias=True)
        self.registry = registry or rule_elements
        self.resolver = resolver or DefaultValueResolver()
        self.items: list[Item] = [
            ITEM_CLASSES.get(item_source.get("type"), Item)(
                item_source, actor=self, backend=backend, presenter=presenter,
            )
            for item_source in self._source.pop("items")
        ]
        self.synthetics = Synthetics()
        self.rules: list[RuleElement] = []
        self._cycles = 0
        self._preparing = False

    def __repr__(self) -> str:
        return f"<Actor {self.name!r} ({self.id})>"

    @property
    def id(self) -> str:
        return self._source["_id"]

    @property
    def name(self) -> str:
        return self._source["name"]

    @property
    def type(self) -> str:
        return self._source["type"]

    @property
    def level(self) -> int:
        return self._source["data"]["details"]["level"]["value"]

    def to_object(self) -> dict[str, Any]:
        source = deep_clone(self._source)
        source["items"] = [item.to_object() for item in self.items]
        return source

    def get_item(self, item_id: str) -> Item | None:
        return next((item for item in self.items if item.id == item_id), None)

    @property
    def roll_options(self) -> set[str]:
        """Options visible to predicates right now, including any set by
        rule elements earlier in the current cycle."""
        options = {f"self:type:{self.type}", f"self:level:{self.level}"}
        options.update(f"item:{item.slug}" for item in self.items)
        for option, enabled in self.synthetics.roll_options.get("all", {}).items():
            if enabled:
                options.add(option)
        return options

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------

    def prepare_rule_elements(self) -> list[RuleElement]:
        """Build this cycle's rule elements, ordered by priority."""
        rules: list[RuleElement] = []
        for item in self.items:
            rules.extend(self.registry.from_owned_item(item, resolver=self.resolver))
        return sorted(rules, key=lambda rule: rule.priority)

    def prepare_data(self) -> PreparationCycle:
        """Run one preparation cycle and return its outcome."""
        if self._preparing:
            raise RuntimeError(f"{self!r} is already preparing data")
        self._preparing = True
        try:
            self._cycles += 1
            self.synthetics = Synthetics()
            self.rules = self.prepare_rule_elements()
            active = [rule for rule in self.rules if rule.active]
            for rule in active:
                rule.before_prepare_data()
            for rule in active:
                rule.after_prepare_data()
            cycle = PreparationCycle(self._cycles, list(self.rules), self.synthetics)
        finally:
            self._preparing = False

        if cycle.suppressed:
            logger.debug(
                "Cycle %d of %r: %d active, %d suppressed rule elements",
                cycle.number, self, len(cycle.active), len(cycle.suppressed),
            )
        return cycle
