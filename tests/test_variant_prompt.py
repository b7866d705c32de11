"""
Tests for grimoire_app/widgets/variant_prompt.py -- SpellVariantPrompt dialog.

All tests use the qtbot fixture from pytest-qt.
"""

from PySide6.QtWidgets import QDialog

from grimoire_app.widgets.variant_prompt import SpellVariantPrompt

from conftest import make_spell, override_record


class TestSpellVariantPrompt:
    def test_lists_override_variants(self, qtbot, spell_source):
        spell, _ = make_spell(
            spell_source,
            override_record("one", 1, name="Fireball (Wide)"),
            override_record("two", 2, name="Fireball (Far)", data={"level": {"value": 5}}),
        )
        prompt = SpellVariantPrompt(spell)
        qtbot.addWidget(prompt)

        assert [variant.id for variant in prompt.choices] == ["one", "two"]
        labels = [prompt._list.item(row).text() for row in range(prompt._list.count())]
        assert labels == ["Fireball (Wide) (rank 3)", "Fireball (Far) (rank 5)"]
        assert prompt._ok_btn.isEnabled()

    def test_no_choices_disables_cast(self, qtbot, spell):
        prompt = SpellVariantPrompt(spell)
        qtbot.addWidget(prompt)
        assert prompt.choices == []
        assert not prompt._ok_btn.isEnabled()

    def test_accept_selects_current_row(self, qtbot, spell_source):
        spell, _ = make_spell(
            spell_source,
            override_record("one", 1, name="Fireball (Wide)"),
            override_record("two", 2, name="Fireball (Far)"),
        )
        prompt = SpellVariantPrompt(spell)
        qtbot.addWidget(prompt)

        prompt._list.setCurrentRow(1)
        prompt._ok_btn.click()

        assert prompt.result() == QDialog.DialogCode.Accepted
        assert prompt.selected_variant().name == "Fireball (Far)"

    def test_cancel_selects_nothing(self, qtbot, spell_source):
        spell, _ = make_spell(spell_source, override_record("one", 1))
        prompt = SpellVariantPrompt(spell)
        qtbot.addWidget(prompt)

        prompt.reject()
        assert prompt.selected_variant() is None

    def test_explicit_choices(self, qtbot, spell_source):
        spell, _ = make_spell(
            spell_source,
            override_record("one", 1, name="Fireball (Wide)"),
            override_record("two", 2, name="Fireball (Far)"),
        )
        only = [spell.load_variant(["two"])]
        prompt = SpellVariantPrompt(spell, choices=only)
        qtbot.addWidget(prompt)
        assert [variant.id for variant in prompt.choices] == ["two"]
        assert prompt.windowTitle() == "Fireball: Choose Variant"
