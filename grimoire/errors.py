"""
grimoire/errors.py -- Exception types raised by the grimoire engine.

Every error derives from ``GrimoireError`` and from the builtin that best
describes it, so callers may catch either ``OverlayNotFoundError`` or a
plain ``KeyError``.
"""

from __future__ import annotations


class GrimoireError(Exception):
    """Base class for all grimoire errors."""


class OverlayNotFoundError(GrimoireError, KeyError):
    """An overlay id is not present in a spell's overlay collection."""

    def __init__(self, overlay_id: str, message: str = ""):
        self.overlay_id = overlay_id
        super().__init__(message or f"No overlay with id: {overlay_id}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class UnsupportedOverlayKind(GrimoireError, ValueError):
    """``OverlayStore.create`` was asked for a kind it cannot build."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Cannot create an overlay of type '{kind}'")


class DocumentValidationError(GrimoireError, ValueError):
    """An item or spell source failed its model validation."""

    def __init__(self, message: str, issues: list[str] | None = None):
        super().__init__(message)
        self.issues = issues or []


class RuleConstructionError(GrimoireError, ValueError):
    """A rule element could not be created for lack of an owning item or actor."""


class RuleValidationError(GrimoireError, ValueError):
    """Recorded on a suppressed rule element; never raised out of a cycle."""


class PersistenceError(GrimoireError, OSError):
    """The persistence backend failed to apply an update."""
