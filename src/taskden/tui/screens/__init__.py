"""Textual Screen components for the taskden TUI."""

from .form_screens import AreaFormScreen, FormScreen, NoteFormScreen, TaskFormScreen
from .main_screen import MainScreen

__all__ = [
    "AreaFormScreen",
    "FormScreen",
    "MainScreen",
    "NoteFormScreen",
    "TaskFormScreen",
]
