"""
Tests for grimoire_app/main.py and grimoire_app/paths.py -- argument
parsing, loading a spell from the JSON store, and the entry point.
"""

import json
import sys

import pytest

import grimoire_app.paths as paths
from grimoire.errors import PersistenceError
from grimoire_app.main import load_spell, main, parse_args
from grimoire_app.services.event_bus import EventBus
from grimoire_app.widgets.variant_prompt import SpellVariantPrompt

from conftest import SPELL_ID, override_record


@pytest.fixture(autouse=True)
def _restore_excepthook(monkeypatch):
    """main() installs its own excepthook; keep it out of other tests."""
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    EventBus.reset()
    yield
    EventBus.reset()


@pytest.fixture
def documents(tmp_path, spell_source):
    spell_source["data"]["overlays"] = {
        "one": override_record("one", 1, name="Fireball (Wide)"),
    }
    path = tmp_path / "documents.json"
    path.write_text(json.dumps({SPELL_ID: spell_source}), encoding="utf-8")
    return path


class TestParseArgs:
    def test_spell_id_and_default_store(self):
        args = parse_args([SPELL_ID])
        assert args.spell_id == SPELL_ID
        assert args.documents is None

    def test_documents_option(self):
        args = parse_args([SPELL_ID, "--documents", "/tmp/docs.json"])
        assert args.documents == "/tmp/docs.json"

    def test_spell_id_is_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestLoadSpell:
    def test_loads_spell_with_overlays(self, documents):
        spell = load_spell(documents, SPELL_ID)
        assert spell.name == "Fireball"
        assert list(spell.overlays) == ["one"]

    def test_missing_spell_raises(self, documents):
        with pytest.raises(PersistenceError):
            load_spell(documents, "nope")


class TestMain:
    def test_missing_spell_returns_one(self, documents):
        assert main(["nope", "--documents", str(documents)]) == 1

    def test_spell_without_variants_returns_zero(self, qapp, tmp_path, spell_source):
        path = tmp_path / "documents.json"
        path.write_text(json.dumps({SPELL_ID: spell_source}), encoding="utf-8")
        assert main([SPELL_ID, "--documents", str(path)]) == 0

    def test_chosen_variant_is_printed(self, qapp, documents, monkeypatch, capsys):
        monkeypatch.setattr(SpellVariantPrompt, "exec", lambda self: self._on_accept())
        assert main([SPELL_ID, "--documents", str(documents)]) == 0
        assert capsys.readouterr().out.strip() == "Fireball (Wide)"

    def test_default_store_lives_in_user_data_dir(self, tmp_path, monkeypatch):
        monkeypatch.setattr(paths, "user_data_dir", lambda *args: str(tmp_path / "data"))
        assert paths.get_documents_path() == str(tmp_path / "data" / paths.DOCUMENTS_FILENAME)
        assert (tmp_path / "data").is_dir()


class TestExceptionHook:
    def test_uncaught_error_is_logged_and_reported(self, qapp, caplog):
        from grimoire_app.main import _global_exception_hook

        received = []
        EventBus.instance().error_occurred.connect(received.append)
        try:
            raise ValueError("boom")
        except ValueError as exc:
            _global_exception_hook(type(exc), exc, exc.__traceback__)

        assert "boom" in caplog.text
        assert received == ["ValueError: boom"]
