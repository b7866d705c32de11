"""
grimoire_app/paths.py -- Where the desktop app keeps its documents.

Uses platformdirs for the user data directory.
"""

from __future__ import annotations

import os

from platformdirs import user_data_dir

_APP_NAME = "Grimoire"
_APP_AUTHOR = "Grimoire"
DOCUMENTS_FILENAME = "documents.json"


def get_user_data_dir() -> str:
    """Return the platform-appropriate user data directory, creating it."""
    path = user_data_dir(_APP_NAME, _APP_AUTHOR)
    os.makedirs(path, exist_ok=True)
    return path


def get_documents_path() -> str:
    """Return the default JSON document store path."""
    return os.path.join(get_user_data_dir(), DOCUMENTS_FILENAME)
