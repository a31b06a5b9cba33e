"""TUI services layer."""

from taskden.tui.services.data_service import TaskdenDataService

__all__ = ["TaskdenDataService"]
