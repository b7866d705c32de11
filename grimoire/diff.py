"""
grimoire/diff.py -- Structural diff and patch for JSON-like documents.

A patch is a nested dict holding only what changed between two
documents.  Keys that exist in the origin but not in the variant are
recorded as deletion markers (``"-=<key>": None``).  Lists are atomic:
a list that differs at all is replaced whole.

Keys starting with ``-=`` are reserved for markers; ``diff_object``
raises ``ValueError`` if a changed part of the variant carries one.

Usage::

    from grimoire.diff import apply_patch, diff_object

    patch = diff_object(base_source, variant_source)
    assert apply_patch(base_source, patch) == variant_source
"""

from __future__ import annotations

from typing import Any

from grimoire.utils import deep_clone

DELETION_PREFIX = "-="


def diff_object(origin: dict[str, Any], variant: dict[str, Any]) -> dict[str, Any]:
    """Return the minimal patch turning *origin* into *variant*.

    Keys are visited in *variant* order, then deletions in *origin* order,
    so the same inputs always produce the same patch.
    """
    patch: dict[str, Any] = {}
    for key, value in variant.items():
        if key not in origin:
            _check_key(key)
            _check_keys(value)
            patch[key] = deep_clone(value)
            continue
        before = origin[key]
        if isinstance(before, dict) and isinstance(value, dict):
            inner = diff_object(before, value)
            if inner:
                _check_key(key)
                patch[key] = inner
        elif not _values_equal(before, value):
            _check_key(key)
            _check_keys(value)
            patch[key] = deep_clone(value)

    for key in origin:
        if key not in variant:
            patch[f"{DELETION_PREFIX}{key}"] = None
    return patch


def _check_key(key: str) -> None:
    if key.startswith(DELETION_PREFIX):
        raise ValueError(f"Key {key!r} uses the reserved deletion prefix")


def _check_keys(value: Any) -> None:
    if isinstance(value, dict):
        for key, inner in value.items():
            _check_key(key)
            _check_keys(inner)


def _values_equal(a: Any, b: Any) -> bool:
    # bool is an int subclass; True must not equal 1 here
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


def merge_object(target: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge *patch* into *target* in place and return *target*.

    ``-=key`` entries delete ``key`` from the mapping they are merged
    into.  A value stored under a key the target does not have yet is
    inserted verbatim, deletion markers included.
    """
    for key, value in patch.items():
        if key.startswith(DELETION_PREFIX):
            target.pop(key[len(DELETION_PREFIX):], None)
            continue
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            merge_object(existing, value)
        else:
            target[key] = deep_clone(value)
    return target


def apply_patch(document: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Return a new document with *patch* applied; inputs are left untouched."""
    return merge_object(deep_clone(document), patch)
