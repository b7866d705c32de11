"""
Shared pytest fixtures for the grimoire test suite.

Provides:
    - spell_source: a valid Fireball spell source with no overlays
    - backend: an InMemoryBackend holding that spell
    - spell: the Fireball Spell bound to the backend
    - presenter: a MagicMock presenter with no sheets open
    - actor_source: an actor owning a Torch item with rule elements
"""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Qt must not try to open a display while the suite runs
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Add project root to sys.path so that `from grimoire.xxx import ...` works.
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from grimoire.items import Spell  # noqa: E402
from grimoire.persistence import InMemoryBackend  # noqa: E402

SPELL_ID = "fireballSpell001"
ACTOR_ID = "ezrenActor00001"
TORCH_ID = "torchItem000001"


@pytest.fixture
def spell_source():
    """Return a valid Fireball source with no overlays."""
    return {
        "_id": SPELL_ID,
        "name": "Fireball",
        "type": "spell",
        "img": "icons/fireball.webp",
        "sort": 0,
        "flags": {},
        "data": {
            "description": {"value": "A roaring blast of fire."},
            "level": {"value": 3},
            "traditions": {"value": ["arcane", "primal"]},
            "time": {"value": "2"},
            "range": {"value": "500 feet"},
            "area": {"type": "burst", "value": 20},
            "damage": {"value": {"0": {"value": "6d6", "type": "fire"}}},
            "components": {"somatic": True, "verbal": True},
            "overlays": {},
            "rules": [],
        },
    }


@pytest.fixture
def backend(spell_source):
    return InMemoryBackend([spell_source])


@pytest.fixture
def presenter():
    mock = MagicMock()
    mock.is_rendered.return_value = False
    return mock


@pytest.fixture
def spell(backend, presenter):
    return Spell(backend.get(SPELL_ID), backend=backend, presenter=presenter)


def override_record(overlay_id, sort=1, **fields):
    """Build an override overlay record."""
    record = {"_id": overlay_id, "sort": sort, "overlayType": "override"}
    record.update(fields)
    return record


def make_spell(spell_source, *records, presenter=None):
    """Return (spell, backend) with *records* already persisted."""
    source = dict(spell_source)
    source["data"] = dict(spell_source["data"])
    source["data"]["overlays"] = {r["_id"]: r for r in records}
    store = InMemoryBackend([source])
    return Spell(store.get(source["_id"]), backend=store, presenter=presenter), store


@pytest.fixture
def light_rule():
    return {"key": "TokenLight", "value": {"dim": 40, "bright": 20, "color": "#ffaa00"}}


@pytest.fixture
def actor_source(light_rule):
    """Return an actor owning a Torch whose only rule is *light_rule*."""
    return {
        "_id": ACTOR_ID,
        "name": "Ezren",
        "type": "character",
        "data": {"details": {"level": {"value": 5}}},
        "items": [
            {
                "_id": TORCH_ID,
                "name": "Torch",
                "type": "equipment",
                "data": {"rules": [light_rule]},
            },
        ],
    }
