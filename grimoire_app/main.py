"""
grimoire_app/main.py -- Desktop entry point: pick a variant of a spell.

Loads a spell from the JSON document store, shows its override variants
in a ``SpellVariantPrompt`` and prints the chosen variant's name.

Usage::

    python -m grimoire_app.main SPELL_ID [--documents PATH]
"""

from __future__ import annotations

import argparse
import logging
import sys
import traceback

from grimoire.errors import GrimoireError
from grimoire.items import Spell
from grimoire.persistence import JsonFileBackend
from grimoire_app.paths import get_documents_path


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _global_exception_hook(exc_type, exc_value, exc_tb):
    """Last-resort handler for uncaught exceptions.

    Logs the traceback and reports the error on the event bus (if a
    QApplication exists).
    """
    logging.getLogger("grimoire_app").critical(
        "Uncaught exception: %s",
        "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
    )

    from PySide6.QtWidgets import QApplication
    if QApplication.instance() is not None:
        from grimoire_app.services.event_bus import EventBus
        EventBus.instance().error_occurred.emit(f"{exc_type.__name__}: {exc_value}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Choose a variant of a stored spell.")
    parser.add_argument("spell_id", help="_id of the spell document")
    parser.add_argument(
        "--documents",
        default=None,
        help="JSON document store (default: the user data directory)",
    )
    return parser.parse_args(argv)


def load_spell(documents_path: str, spell_id: str) -> Spell:
    """Load *spell_id* from the store at *documents_path*."""
    backend = JsonFileBackend(documents_path)
    return Spell(backend.get(spell_id), backend=backend)


def main(argv: list[str] | None = None) -> int:
    _setup_logging()
    logger = logging.getLogger("grimoire_app")
    sys.excepthook = _global_exception_hook

    args = parse_args(argv)
    documents_path = args.documents or get_documents_path()
    try:
        spell = load_spell(documents_path, args.spell_id)
    except GrimoireError as exc:
        logger.error("Could not load spell %s: %s", args.spell_id, exc)
        return 1

    from PySide6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication(sys.argv[:1])  # noqa: F841

    from grimoire_app.services.sheet_presenter import SheetPresenter
    from grimoire_app.widgets.variant_prompt import SpellVariantPrompt

    presenter = SheetPresenter()
    spell.presenter = presenter
    prompt = SpellVariantPrompt(spell)
    if not prompt.choices:
        logger.info("%s has no override variants", spell.name)
        return 0
    prompt.exec()
    variant = prompt.selected_variant()
    if variant is not None:
        presenter.render(variant)
        print(variant.name)
    return 0


if __name__ == "__main__":
    sys.exit(main())
