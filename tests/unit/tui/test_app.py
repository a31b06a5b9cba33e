"""Unit tests for TaskdenApp and its main screen.

Tests cover:
- App initialization with dependency injection
- Table population from the data service
- View switching and row keybindings
- Modal forms for new tasks and notes
"""

from collections.abc import Awaitable, Callable

import pytest
from textual.widgets import Footer, Header, Input, TabbedContent

from taskden.domain.models import Priority, Status
from taskden.infrastructure.config import Config, TUIConfig
from taskden.tui.app import TaskdenApp
from taskden.tui.screens.form_screens import NoteFormScreen, TaskFormScreen
from taskden.tui.screens.main_screen import MainScreen
from taskden.tui.services.data_service import TaskdenDataService
from taskden.tui.widgets.entity_table import EntityTable


@pytest.fixture
async def service(memory_db):
    data_service = TaskdenDataService(memory_db)
    await data_service.initialize()
    return data_service


@pytest.fixture
def app(service):
    return TaskdenApp(data_service=service, config=Config())


async def wait_until(pilot, check: Callable[[], Awaitable[bool] | bool], attempts: int = 50) -> bool:
    """Poll ``check`` while letting the app process messages."""
    for _ in range(attempts):
        result = check()
        if not isinstance(result, bool):
            result = await result
        if result:
            return True
        await pilot.pause(0.02)
    return False


def tasks_table(app: TaskdenApp) -> EntityTable:
    return app.screen.query_one("#tasks-table", EntityTable)


class TestAppInitialization:
    """Test app initialization and configuration."""

    def test_app_uses_injected_service(self, service):
        app = TaskdenApp(data_service=service)

        assert app.data_service is service
        assert app.config == Config()
        assert app.show_archived is False

    def test_show_archived_from_config(self, service):
        config = Config(tui=TUIConfig(show_archived=True))
        assert TaskdenApp(data_service=service, config=config).show_archived is True

    @pytest.mark.asyncio
    async def test_main_screen_composition(self, app):
        async with app.run_test() as pilot:
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))
            screen = app.screen

            assert len(screen.query(Header)) == 1
            assert len(screen.query(Footer)) == 1
            for view in ("tasks", "areas", "notes"):
                assert screen.query_one(f"#{view}-table", EntityTable) is not None
            assert screen.query_one(TabbedContent).active == "tasks"

    @pytest.mark.asyncio
    async def test_unknown_theme_ignored(self, service):
        app = TaskdenApp(data_service=service, config=Config(theme="no-such-theme"))

        async with app.run_test() as pilot:
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))
            assert app.theme != "no-such-theme"


class TestMainScreen:
    """Test table contents and keybindings."""

    @pytest.mark.asyncio
    async def test_tables_show_rows(self, app, service):
        await service.create_task("Book dentist", priority=Priority.HIGH)
        area_id = await service.create_area("Health")
        await service.create_area("Archive me")

        async with app.run_test() as pilot:
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))
            assert await wait_until(pilot, lambda: tasks_table(app).row_count == 1)
            areas = app.screen.query_one("#areas-table", EntityTable)
            assert areas.row_ids[0] == area_id
            assert areas.row_count == 2

    @pytest.mark.asyncio
    async def test_switch_views(self, app):
        async with app.run_test() as pilot:
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))
            tabs = app.screen.query_one(TabbedContent)

            await pilot.press("2")
            assert await wait_until(pilot, lambda: tabs.active == "areas")
            await pilot.press("3")
            assert await wait_until(pilot, lambda: tabs.active == "notes")
            await pilot.press("1")
            assert await wait_until(pilot, lambda: tabs.active == "tasks")

    @pytest.mark.asyncio
    async def test_set_status_key(self, app, service):
        task_id = await service.create_task("Pay rent")

        async with app.run_test() as pilot:
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))
            assert await wait_until(pilot, lambda: tasks_table(app).selected_id == task_id)

            await pilot.press("d")

            async def is_doing() -> bool:
                return (await service.tasks.read(task_id)).status == Status.DOING.value

            assert await wait_until(pilot, is_doing)

    @pytest.mark.asyncio
    async def test_cycle_priority(self, app, service):
        task_id = await service.create_task("Stretch", priority=Priority.URGENT)

        async with app.run_test() as pilot:
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))
            assert await wait_until(pilot, lambda: tasks_table(app).selected_id == task_id)

            await app.screen.action_cycle_priority()

            assert (await service.tasks.read(task_id)).priority is Priority.LOW

    @pytest.mark.asyncio
    async def test_archive_hides_row(self, app, service):
        await service.create_task("Old errand")

        async with app.run_test() as pilot:
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))
            assert await wait_until(pilot, lambda: tasks_table(app).row_count == 1)

            await pilot.press("a")
            assert await wait_until(pilot, lambda: tasks_table(app).row_count == 0)

            await app.screen.action_toggle_show_archived()
            assert app.show_archived is True
            assert tasks_table(app).row_count == 1

    @pytest.mark.asyncio
    async def test_delete_key(self, app, service):
        await service.create_task("Mistake")

        async with app.run_test() as pilot:
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))
            assert await wait_until(pilot, lambda: tasks_table(app).row_count == 1)

            await pilot.press("delete")

            async def no_tasks() -> bool:
                return await service.fetch_tasks(include_archived=True) == []

            assert await wait_until(pilot, no_tasks)


class TestForms:
    """Test the modal create forms."""

    @pytest.mark.asyncio
    async def test_new_task_form(self, app, service):
        async with app.run_test() as pilot:
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))

            await pilot.press("n")
            assert await wait_until(pilot, lambda: isinstance(app.screen, TaskFormScreen))
            app.screen.query_one("#title-input", Input).value = "Groceries"
            app.screen.query_one("#due-input", Input).value = "2030-01-15"
            await pilot.press("enter")

            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))
            assert await wait_until(pilot, lambda: tasks_table(app).row_count == 1)
            task = await service.tasks.read(tasks_table(app).row_ids[0])
            assert task.title == "Groceries"
            assert task.due_date is not None and task.due_date.year == 2030

    @pytest.mark.asyncio
    async def test_form_requires_title(self, app, service):
        async with app.run_test() as pilot:
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))

            await pilot.press("n")
            assert await wait_until(pilot, lambda: isinstance(app.screen, TaskFormScreen))
            await pilot.press("enter")
            await pilot.pause()

            assert isinstance(app.screen, TaskFormScreen)

            await pilot.press("escape")
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))
            assert await service.fetch_tasks() == []

    @pytest.mark.asyncio
    async def test_new_note_for_selected_task(self, app, service):
        task_id = await service.create_task("Read book")

        async with app.run_test() as pilot:
            assert await wait_until(pilot, lambda: isinstance(app.screen, MainScreen))
            assert await wait_until(pilot, lambda: tasks_table(app).selected_id == task_id)

            app.screen.action_new_note()
            assert await wait_until(pilot, lambda: isinstance(app.screen, NoteFormScreen))
            app.screen.query_one("#title-input", Input).value = "Quotes"
            app.screen.query_one("#path-input", Input).value = "books/quotes.md"
            await pilot.press("enter")

            async def note_created() -> bool:
                notes = await service.fetch_notes()
                return [(n.title, n.parent_id) for n in notes] == [("Quotes", task_id)]

            assert await wait_until(pilot, note_created)
