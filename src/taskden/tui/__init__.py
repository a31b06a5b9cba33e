"""TUI (Text User Interface) module for browsing tasks, areas and notes."""

from taskden.tui.app import TaskdenApp
from taskden.tui.services import TaskdenDataService

__all__ = ["TaskdenApp", "TaskdenDataService"]
