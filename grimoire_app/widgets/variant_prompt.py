"""
grimoire_app/widgets/variant_prompt.py -- Spell variant picker dialog.

A small modal dialog listing the override variants of a spell so the user
can choose which one to cast.
"""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from grimoire.items import Spell


class SpellVariantPrompt(QDialog):
    """Modal dialog for selecting one of a spell's variants.

    Parameters
    ----------
    spell : Spell
        The base spell; its title is shown in the header.
    choices : list[Spell] | None
        Variants to offer.  Defaults to ``spell.overlays.override_variants()``.
    parent : QWidget | None
        Parent widget.
    """

    def __init__(
        self,
        spell: Spell,
        choices: list[Spell] | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self.setWindowTitle(f"{spell.name}: Choose Variant")
        self.setMinimumSize(320, 260)
        self.setModal(True)

        self._choices: list[Spell] = (
            list(choices) if choices is not None else spell.overlays.override_variants()
        )
        self._selected: Spell | None = None

        layout = QVBoxLayout(self)
        layout.setSpacing(8)

        header = QLabel(spell.name)
        header.setAlignment(Qt.AlignmentFlag.AlignCenter)
        header.setStyleSheet("font-weight: bold; font-size: 13px; padding: 6px;")
        layout.addWidget(header)

        self._list = QListWidget()
        for index, variant in enumerate(self._choices):
            item = QListWidgetItem(f"{variant.name} (rank {variant.level})")
            item.setData(Qt.ItemDataRole.UserRole, index)
            self._list.addItem(item)
        if self._choices:
            self._list.setCurrentRow(0)
        self._list.itemDoubleClicked.connect(self._on_accept)
        layout.addWidget(self._list, 1)

        btn_row = QHBoxLayout()
        btn_row.setSpacing(8)

        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        btn_row.addWidget(cancel_btn)

        btn_row.addStretch()

        self._ok_btn = QPushButton("Cast")
        self._ok_btn.setEnabled(bool(self._choices))
        self._ok_btn.clicked.connect(self._on_accept)
        btn_row.addWidget(self._ok_btn)

        layout.addLayout(btn_row)

    @property
    def choices(self) -> list[Spell]:
        return list(self._choices)

    def _on_accept(self) -> None:
        """Accept with the currently selected variant."""
        current = self._list.currentItem()
        if current is not None:
            self._selected = self._choices[current.data(Qt.ItemDataRole.UserRole)]
            self.accept()

    def selected_variant(self) -> Spell | None:
        """Return the chosen variant, or ``None`` if cancelled."""
        return self._selected
