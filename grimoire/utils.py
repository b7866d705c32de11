"""
Shared document helpers for the grimoire engine.

Consolidates the small helpers every engine module needs: id generation,
deep cloning, dotted-path access into nested source dicts, and the JSON
file I/O used by the file-backed document store.

All JSON writes use atomic temp-file-then-os.replace() to prevent
data corruption from crashes or concurrent access.
"""

import copy
import json
import logging
import os
import re
import secrets
import string
import tempfile
import unicodedata

logger = logging.getLogger(__name__)

ID_LENGTH = 16
_ID_ALPHABET = string.ascii_letters + string.digits


# ---------------------------------------------------------------------------
# Ids and cloning
# ---------------------------------------------------------------------------

def random_id(length=ID_LENGTH, exclude=()):
    """Return a random alphanumeric id that is not in *exclude*.

    Parameters
    ----------
    length : int, optional
        Number of characters (default 16).
    exclude : collection of str, optional
        Ids that must not be returned (live keys and retired ids).
    """
    while True:
        candidate = "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))
        if candidate not in exclude:
            return candidate


def slugify(text: str) -> str:
    """Convert a human-readable name to a slug.

    Examples:
        "Fireball"          -> "fireball"
        "Dragon's Breath"   -> "dragons-breath"
        "Cône de Froid"     -> "cone-de-froid"
    """
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower().replace("'", "")
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return re.sub(r"-+", "-", text).strip("-")


def deep_clone(value):
    """Return an independent deep copy of a JSON-like value."""
    return copy.deepcopy(value)


# ---------------------------------------------------------------------------
# Dotted paths
# ---------------------------------------------------------------------------

def expand_object(changes: dict) -> dict:
    """Expand dotted keys into nested dicts.

    ``{"data.level.value": 3}`` becomes ``{"data": {"level": {"value": 3}}}``.
    Keys without dots are copied as-is; nested dict values are expanded too.
    """
    expanded: dict = {}
    for key, value in changes.items():
        if isinstance(value, dict):
            value = expand_object(value)
        parts = key.split(".")
        target = expanded
        for part in parts[:-1]:
            existing = target.get(part)
            if not isinstance(existing, dict):
                existing = {}
                target[part] = existing
            target = existing
        leaf = parts[-1]
        if isinstance(value, dict) and isinstance(target.get(leaf), dict):
            target[leaf].update(value)
        else:
            target[leaf] = value
    return expanded


def get_property(data, path: str, default=None):
    """Follow a dotted *path* through nested dicts, returning *default* if
    any segment is missing."""
    current = data
    for key in path.split("."):
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return default
    return current


# ---------------------------------------------------------------------------
# JSON I/O (atomic writes)
# ---------------------------------------------------------------------------

def safe_read_json(path, default=None):
    """Read a JSON file, returning *default* if the file is missing or corrupt.

    Parameters
    ----------
    path : str or pathlib.Path
        Absolute path to the JSON file.
    default
        Value returned when the file cannot be read (default ``None``).
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError:
        return default
    except json.JSONDecodeError:
        logger.warning("Ignoring corrupt JSON file %s", path)
        return default


def safe_write_json(path, data, *, indent=2):
    """Atomically write *data* as JSON to *path*.

    Uses a temporary file in the same directory followed by
    ``os.replace()`` so that readers never see a partially-written file.
    Parent directories are created if they do not exist.
    """
    path = str(path)
    parent = os.path.dirname(path) or "."
    os.makedirs(parent, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=indent, ensure_ascii=False)
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any failure.
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
