"""
grimoire/rules/resolve.py -- Value resolution for rule element payloads.

Payload numbers may be literals or references to the owning documents.
Resolution is pluggable; the default resolver understands:

    5, 2.5            returned unchanged
    "10", "-1.5"      parsed into numbers
    "@actor.<path>"   looked up in the owning actor's source
    "@item.<path>"    looked up in the owning item's source
    "@rule.<path>"    looked up in the rule element's own data

Anything else (including references that do not resolve) is returned as
given, so callers can tell a failed resolution by its type.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Protocol

from grimoire.utils import get_property

if TYPE_CHECKING:
    from grimoire.rules.base import RuleElement

_NUMBER = re.compile(r"^\s*-?\d+(\.\d+)?\s*$")
_REFERENCE = re.compile(r"^@(actor|item|rule)\.([\w.-]+)$")


class ValueResolver(Protocol):
    def resolve(self, value: Any, *, rule: RuleElement) -> Any: ...


class DefaultValueResolver:
    """Resolve literals and single ``@document.path`` references."""

    def resolve(self, value: Any, *, rule: RuleElement) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value
        if not isinstance(value, str):
            return value

        if _NUMBER.match(value):
            return self._number(value)

        match = _REFERENCE.match(value.strip())
        if match is None:
            return value
        scope, path = match.groups()
        if scope == "actor":
            data = rule.actor.to_object() if rule.actor is not None else {}
        elif scope == "item":
            data = rule.item.to_object() if rule.item is not None else {}
        else:
            data = rule.data
        resolved = get_property(data, path)
        if resolved is None:
            return value
        if isinstance(resolved, str) and _NUMBER.match(resolved):
            return self._number(resolved)
        return resolved

    @staticmethod
    def _number(text: str) -> int | float:
        number = float(text)
        return int(number) if number.is_integer() and "." not in text else number
