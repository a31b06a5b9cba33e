"""Reusable widgets for the taskden TUI."""

from taskden.tui.widgets.entity_table import EntityTable

__all__ = ["EntityTable"]
