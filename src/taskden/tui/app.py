"""Main TaskdenApp Textual application.

This module implements the interactive browser for tasks, areas and notes.
"""

from typing import Any

from textual.app import App
from textual.binding import Binding
from textual.reactive import var

from taskden.infrastructure.config import Config
from taskden.infrastructure.logger import get_logger

from .exceptions import TUIDataError
from .screens.main_screen import MainScreen
from .services.data_service import TaskdenDataService

logger = get_logger(__name__)


class TaskdenApp(App[None]):
    """Textual application for browsing and editing the task database.

    Attributes:
        data_service: Repository facade shared by every screen
        config: Loaded configuration (theme, editor, notes path)
        show_archived: Whether archived tasks and areas are listed (reactive)
    """

    TITLE = "taskden"

    CSS = """
    Screen {
        background: $surface;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
    ]

    show_archived: var[bool] = var(False)

    def __init__(
        self,
        data_service: TaskdenDataService,
        config: Config | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize TaskdenApp.

        Args:
            data_service: Service for loading and changing data
            config: Configuration; defaults are used when omitted
            **kwargs: Additional arguments passed to App base class
        """
        super().__init__(**kwargs)
        self.data_service = data_service
        self.config = config or Config()
        self.show_archived = self.config.tui.show_archived

    async def on_mount(self) -> None:
        """Apply the theme, open the database, then install MainScreen."""
        if self.config.theme in self.available_themes:
            self.theme = self.config.theme
        else:
            logger.warning("unknown_theme", theme=self.config.theme)

        try:
            await self.data_service.initialize()
        except TUIDataError as e:
            self.exit(return_code=1, message=str(e))
            return

        await self.push_screen(MainScreen())

    async def on_unmount(self) -> None:
        await self.data_service.close()

    async def action_quit(self) -> None:
        self.exit()
