"""
grimoire_app -- PySide6 presentation layer for grimoire.

Package layout:
    services/   Event bus and the sheet presenter used by the engine
    widgets/    Dialogs (spell variant picker)
"""
