"""
grimoire/rules/predicate.py -- Roll-option predicates for rule elements.

A predicate is a list of statements that must all hold.  A statement is
either an atom (a roll option string such as ``"self:level:5"``) or a
single-key mapping combining other statements::

    ["item:torch", {"not": "self:condition:blinded"}]
    [{"or": ["feat:darkvision", "ancestry:dwarf"]}]

Supported combinators: ``not`` (one statement), ``and``, ``or`` and
``nor`` (lists of statements).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

_LIST_OPERATORS = frozenset({"and", "or", "nor"})


class Predicate:
    """An immutable list of statements tested against a set of options."""

    def __init__(self, statements: Iterable[Any] | None = None):
        self.statements: tuple[Any, ...] = tuple(statements or ())
        self.is_valid: bool = all(_is_statement(s) for s in self.statements)

    def __repr__(self) -> str:
        return f"Predicate({list(self.statements)!r})"

    def __bool__(self) -> bool:
        return bool(self.statements)

    def test(self, options: Iterable[str]) -> bool:
        """True when every statement holds for *options*.

        An invalid predicate never passes.
        """
        if not self.is_valid:
            return False
        domain = options if isinstance(options, (set, frozenset)) else set(options)
        return all(_test_statement(s, domain) for s in self.statements)


def _is_statement(statement: Any) -> bool:
    if isinstance(statement, str):
        return bool(statement)
    if not isinstance(statement, dict) or len(statement) != 1:
        return False
    (operator, operand), = statement.items()
    if operator == "not":
        return _is_statement(operand)
    if operator in _LIST_OPERATORS:
        return isinstance(operand, list) and all(_is_statement(s) for s in operand)
    return False


def _test_statement(statement: Any, options: set[str]) -> bool:
    if isinstance(statement, str):
        return statement in options
    (operator, operand), = statement.items()
    if operator == "not":
        return not _test_statement(operand, options)
    if operator == "and":
        return all(_test_statement(s, options) for s in operand)
    if operator == "or":
        return any(_test_statement(s, options) for s in operand)
    return not any(_test_statement(s, options) for s in operand)
