"""Main screen: tasks, areas and notes in three tabbed tables."""

from typing import TYPE_CHECKING, Any, cast

from textual.app import ComposeResult, SuspendNotSupported
from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import Footer, Header, TabbedContent, TabPane

from taskden.domain.models import AreaParent, AreaRow, Status, TaskParent, TaskRow
from taskden.infrastructure.editor import open_in_editor
from taskden.infrastructure.exceptions import EditorError
from taskden.tui.exceptions import TUIDataError
from taskden.tui.screens.form_screens import AreaFormScreen, NoteFormScreen, TaskFormScreen
from taskden.tui.widgets.entity_table import EntityTable

if TYPE_CHECKING:
    from taskden.tui.app import TaskdenApp
    from taskden.tui.services.data_service import TaskdenDataService

VIEWS = ("tasks", "areas", "notes")

TASK_COLUMNS = ("ID", "Title", "Priority", "Status", "Age", "Notes", "Arch")
AREA_COLUMNS = ("ID", "Title", "Status", "Age", "Notes", "Arch")
NOTE_COLUMNS = ("ID", "Title", "Type", "Linked To", "Path")


class MainScreen(Screen[None]):
    """Primary screen with one table per entity kind.

    Layout:
    - Header
    - TabbedContent: Tasks | Areas | Notes, each an EntityTable
    - Footer: keybinding hints
    """

    BINDINGS = [
        Binding("1", "show_view('tasks')", "Tasks"),
        Binding("2", "show_view('areas')", "Areas"),
        Binding("3", "show_view('notes')", "Notes"),
        Binding("r", "refresh", "Refresh"),
        Binding("t", "set_status('todo')", "Todo", show=False),
        Binding("p", "set_status('planning')", "Planning", show=False),
        Binding("d", "set_status('doing')", "Doing", show=False),
        Binding("D", "set_status('done')", "Done", show=False),
        Binding("P", "cycle_priority", "Priority", show=False),
        Binding("a", "toggle_archived", "Archive"),
        Binding("A", "toggle_show_archived", "Show Archived", show=False),
        Binding("n", "new_entry", "New"),
        Binding("N", "new_note", "New Note"),
        Binding("o", "open_notes", "Open"),
        Binding("delete,backspace", "delete_selected", "Delete"),
    ]

    CSS = """
    MainScreen {
        layout: vertical;
    }

    TabbedContent {
        height: 1fr;
    }

    EntityTable {
        height: 1fr;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._tasks: dict[int, TaskRow] = {}
        self._areas: dict[int, AreaRow] = {}

    # ===== Layout =====

    def compose(self) -> ComposeResult:
        yield Header()
        with TabbedContent(initial="tasks", id="views"):
            with TabPane("Tasks", id="tasks"):
                yield EntityTable(TASK_COLUMNS, id="tasks-table")
            with TabPane("Areas", id="areas"):
                yield EntityTable(AREA_COLUMNS, id="areas-table")
            with TabPane("Notes", id="notes"):
                yield EntityTable(NOTE_COLUMNS, id="notes-table")
        yield Footer()

    async def on_mount(self) -> None:
        self.query_one("#tasks-table", EntityTable).focus()
        await self.refresh_data()

    # ===== Helpers =====

    @property
    def taskden_app(self) -> "TaskdenApp":
        return cast("TaskdenApp", self.app)

    @property
    def service(self) -> "TaskdenDataService":
        return self.taskden_app.data_service

    @property
    def active_view(self) -> str:
        return self.query_one(TabbedContent).active or "tasks"

    def table(self, view: str) -> EntityTable:
        return self.query_one(f"#{view}-table", EntityTable)

    def selected_id(self, view: str | None = None) -> int | None:
        return self.table(view or self.active_view).selected_id

    def selected_parent(self) -> TaskParent | AreaParent | None:
        view = self.active_view
        entity_id = self.selected_id(view)
        if entity_id is None or view == "notes":
            return None
        return TaskParent(id=entity_id) if view == "tasks" else AreaParent(id=entity_id)

    def _report(self, error: Exception) -> None:
        self.notify(str(error), severity="error", timeout=6)

    # ===== Data =====

    async def refresh_data(self) -> None:
        """Reload all three tables from the database."""
        show_archived = self.taskden_app.show_archived
        try:
            tasks = await self.service.fetch_tasks(include_archived=show_archived)
            areas = await self.service.fetch_areas(include_archived=show_archived)
            notes = await self.service.fetch_notes()
        except TUIDataError as e:
            self._report(e)
            return

        self._tasks = {row.id: row for row in tasks}
        self._areas = {row.id: row for row in areas}

        self.table("tasks").load(
            [
                (
                    row.id,
                    (
                        str(row.id),
                        row.title,
                        row.priority.value if row.priority else "",
                        row.status or "",
                        f"{row.age_in_days:.1f}d",
                        row.note_titles,
                        "x" if row.archived else "",
                    ),
                )
                for row in tasks
            ]
        )
        self.table("areas").load(
            [
                (
                    row.id,
                    (
                        str(row.id),
                        row.title,
                        row.status or "",
                        f"{row.age_in_days:.1f}d",
                        row.note_titles,
                        "x" if row.archived else "",
                    ),
                )
                for row in areas
            ]
        )
        self.table("notes").load(
            [
                (
                    row.id,
                    (str(row.id), row.title, str(row.note_type), row.link_title, row.path),
                )
                for row in notes
            ]
        )

    async def _run(self, change: Any) -> bool:
        """Await a data-service call, report failures, refresh on success."""
        try:
            await change
        except TUIDataError as e:
            self._report(e)
            return False
        await self.refresh_data()
        return True

    # ===== Actions =====

    def action_show_view(self, view: str) -> None:
        if view not in VIEWS:
            return
        self.query_one(TabbedContent).active = view
        self.table(view).focus()

    async def action_refresh(self) -> None:
        await self.refresh_data()

    async def action_set_status(self, status: str) -> None:
        view = self.active_view
        entity_id = self.selected_id(view)
        if entity_id is None:
            return
        if view == "tasks":
            await self._run(self.service.set_task_status(entity_id, Status(status)))
        elif view == "areas":
            await self._run(self.service.set_area_status(entity_id, Status(status)))
        else:
            self.notify("Notes have no status", severity="warning")

    async def action_cycle_priority(self) -> None:
        entity_id = self.selected_id()
        if self.active_view != "tasks" or entity_id is None:
            return
        current = self._tasks[entity_id].priority
        await self._run(self.service.cycle_task_priority(entity_id, current))

    async def action_toggle_archived(self) -> None:
        view = self.active_view
        entity_id = self.selected_id(view)
        if entity_id is None:
            return
        if view == "tasks":
            archived = not self._tasks[entity_id].archived
            await self._run(self.service.set_task_archived(entity_id, archived))
        elif view == "areas":
            archived = not self._areas[entity_id].archived
            await self._run(self.service.set_area_archived(entity_id, archived))

    async def action_toggle_show_archived(self) -> None:
        app = self.taskden_app
        app.show_archived = not app.show_archived
        self.notify("Showing archived" if app.show_archived else "Hiding archived")
        await self.refresh_data()

    def action_new_entry(self) -> None:
        view = self.active_view
        if view == "tasks":
            self.app.push_screen(TaskFormScreen(), callback=self._create_task)
        elif view == "areas":
            self.app.push_screen(AreaFormScreen(), callback=self._create_area)
        else:
            self.notify("Select a task or area and press N to add a note", severity="warning")

    def action_new_note(self) -> None:
        parent = self.selected_parent()
        if parent is None:
            self.notify("Select a task or area first", severity="warning")
            return
        label = f"{parent.kind.title()} {parent.id}"
        self.app.push_screen(
            NoteFormScreen(label),
            callback=lambda values: self._create_note(values, parent),
        )

    async def _create_task(self, values: dict[str, Any] | None) -> None:
        if values is None:
            return
        if await self._run(self.service.create_task(**values)):
            self.notify(f"Task '{values['title']}' created")

    async def _create_area(self, values: dict[str, Any] | None) -> None:
        if values is None:
            return
        if await self._run(self.service.create_area(**values)):
            self.notify(f"Area '{values['title']}' created")

    async def _create_note(
        self, values: dict[str, Any] | None, parent: TaskParent | AreaParent
    ) -> None:
        if values is None:
            return
        if await self._run(self.service.create_note(values["title"], values["path"], parent)):
            self.notify(f"Note '{values['title']}' created")

    async def action_open_notes(self) -> None:
        """Open the selected note, or every note of the selected task/area."""
        view = self.active_view
        entity_id = self.selected_id(view)
        if entity_id is None:
            return
        try:
            if view == "notes":
                path = await self.service.note_path(entity_id)
                paths = [path] if path else []
            else:
                parent = self.selected_parent()
                assert parent is not None
                paths = await self.service.note_paths_for(parent)
        except TUIDataError as e:
            self._report(e)
            return

        if not paths:
            self.notify("No notes to open", severity="warning")
            return

        try:
            with self.app.suspend():
                await open_in_editor(paths, self.taskden_app.config)
        except SuspendNotSupported:
            self.notify("Cannot open an editor in this terminal", severity="error")
        except EditorError as e:
            self._report(e)

    async def action_delete_selected(self) -> None:
        view = self.active_view
        entity_id = self.selected_id(view)
        if entity_id is None:
            return
        if view == "tasks":
            deleted = await self._run(self.service.delete_task(entity_id))
        elif view == "areas":
            deleted = await self._run(self.service.delete_area(entity_id))
        else:
            deleted = await self._run(self.service.delete_note(entity_id))
        if deleted:
            self.notify(f"Deleted {view[:-1]} {entity_id}")
