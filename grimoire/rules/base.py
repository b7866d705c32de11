"""
grimoire/rules/base.py -- Base class for rule elements.

A rule element is one entry of an item's ``data.rules`` list.  Instances
are rebuilt from that source on every preparation cycle and go through
a fixed sequence of states:

    CONSTRUCTED -> VALIDATING -> ACTIVE
                              -> SUPPRESSED

Validation runs inside the constructor: the common shape, the kind's own
``schema`` (both JSON Schema), the predicate, and finally the kind's
``validate_data()``.  Any failure is recorded on the instance and makes
it SUPPRESSED for the rest of the cycle; nothing is raised and the
persisted source is never touched.

An instance without an owning item, or whose item has no actor, cannot
be built at all and raises ``RuleConstructionError``.
"""

from __future__ import annotations

import logging
import weakref
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

import jsonschema

from grimoire.errors import RuleConstructionError, RuleValidationError
from grimoire.rules.predicate import Predicate
from grimoire.rules.resolve import DefaultValueResolver, ValueResolver
from grimoire.utils import deep_clone

if TYPE_CHECKING:
    from grimoire.actor import Actor
    from grimoire.items import Item

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 100

# Keys every rule element source may carry, whatever its kind
BASE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["key"],
    "properties": {
        "key": {"type": "string", "minLength": 1},
        "label": {"type": "string"},
        "slug": {"type": ["string", "null"]},
        "priority": {"type": "number"},
        "ignored": {"type": "boolean"},
        "predicate": {"type": "array"},
    },
}


class RuleState(str, Enum):
    CONSTRUCTED = "constructed"
    VALIDATING = "validating"
    ACTIVE = "active"
    SUPPRESSED = "suppressed"


class RuleElement:
    """Base class for all rule element kinds.

    Parameters
    ----------
    data : dict
        The rule's source entry.  A deep copy is kept; resolved values
        are written into the copy only.
    item : Item
        The owning item, which must itself be owned by an actor.
    resolver : ValueResolver, optional
        Used by ``resolve_value``; defaults to ``DefaultValueResolver``.
    """

    key: ClassVar[str] = ""
    # JSON Schema for the kind-specific part of the source
    schema: ClassVar[dict[str, Any]] = {}

    def __init__(
        self,
        data: dict[str, Any],
        item: Item | None,
        *,
        resolver: ValueResolver | None = None,
    ):
        if item is None:
            raise RuleConstructionError("A rule element must be owned by an item")
        actor = item.actor
        if actor is None:
            raise RuleConstructionError(f"{item!r} is not owned by an actor")

        self._item_ref = weakref.ref(item)
        self._actor_ref = weakref.ref(actor)
        self.resolver = resolver or DefaultValueResolver()
        self.data: dict[str, Any] = deep_clone(data) if isinstance(data, dict) else {}
        self.failure: RuleValidationError | None = None
        self.state = RuleState.CONSTRUCTED

        self.label: str = item.name
        self.slug: str | None = None
        self.priority: float = DEFAULT_PRIORITY
        self.predicate = Predicate()

        self.state = RuleState.VALIDATING
        if not isinstance(data, dict):
            self.fail_validation("Rule element source must be an object")
            return
        if not self._check_shape():
            return

        self.label = self.data.get("label") or item.name
        self.slug = self.data.get("slug")
        self.priority = self.data.get("priority", DEFAULT_PRIORITY)
        self.predicate = Predicate(self.data.get("predicate", []))
        if not self.predicate.is_valid:
            self.fail_validation(f"Malformed predicate: {list(self.predicate.statements)!r}")
            return

        self.validate_data()

        if self.state is RuleState.VALIDATING:
            self.state = RuleState.SUPPRESSED if self.data.get("ignored") else RuleState.ACTIVE

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.label!r} [{self.state.value}]>"

    # ------------------------------------------------------------------
    # Owners
    # ------------------------------------------------------------------

    @property
    def item(self) -> Item | None:
        return self._item_ref()

    @property
    def actor(self) -> Actor | None:
        return self._actor_ref()

    @property
    def active(self) -> bool:
        return self.state is RuleState.ACTIVE

    @property
    def ignored(self) -> bool:
        return self.state is RuleState.SUPPRESSED

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _check_shape(self) -> bool:
        errors = []
        for schema in (BASE_SCHEMA, self.schema):
            if schema:
                validator = jsonschema.Draft202012Validator(schema)
                errors.extend(validator.iter_errors(self.data))
        if errors:
            self.fail_validation("; ".join(_humanize_error(err) for err in errors))
            return False
        return True

    def validate_data(self) -> None:
        """Kind-specific checks; call ``fail_validation`` on a problem."""

    def fail_validation(self, message: str) -> None:
        """Record *message* and suppress this rule for the cycle."""
        self.failure = RuleValidationError(message)
        self.state = RuleState.SUPPRESSED
        logger.warning(
            "Rule element %s on %r failed to validate: %s",
            self.data.get("key") or type(self).__name__, self.item, message,
        )

    def resolve_value(self, value: Any, default: Any = 0) -> Any:
        """Resolve a literal or reference through the value resolver."""
        if value is None:
            return default
        return self.resolver.resolve(value, rule=self)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def test(self, options=None) -> bool:
        """True when the rule is active and its predicate holds.

        *options* defaults to the actor's current roll options, read fresh
        on every call.
        """
        if self.state is not RuleState.ACTIVE:
            return False
        if options is None:
            actor = self.actor
            options = actor.roll_options if actor is not None else set()
        return self.predicate.test(options)

    def before_prepare_data(self) -> None:
        """Runs on every active rule before any ``after_prepare_data``."""

    def after_prepare_data(self) -> None:
        """Runs on every active rule at the end of the cycle."""


def _humanize_error(error) -> str:
    """Convert a ``jsonschema.ValidationError`` into plain English."""
    path = " -> ".join(str(p) for p in error.absolute_path) if error.absolute_path else "(root)"
    msg = error.message
    if error.validator == "required":
        return f"Missing required field at {path}: {msg}"
    if error.validator == "type":
        return f"Wrong data type at '{path}': {msg}"
    if error.validator == "enum":
        return f"Invalid value at '{path}': {msg}"
    return f"Issue at '{path}': {msg}"
