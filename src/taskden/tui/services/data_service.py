"""Data access for the TUI.

Wraps the three repositories behind one object so screens never touch
the database directly, and converts storage errors into TUIDataError.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

from taskden.domain.models import (
    Area,
    AreaParent,
    AreaRow,
    AreaUpdate,
    Note,
    NoteRow,
    Priority,
    Status,
    Task,
    TaskParent,
    TaskRow,
    TaskUpdate,
)
from taskden.infrastructure.database import Database
from taskden.infrastructure.exceptions import TaskdenError
from taskden.infrastructure.logger import get_logger
from taskden.services import AreaRepository, NoteRepository, TaskRepository
from taskden.tui.exceptions import TUIDataError

logger = get_logger(__name__)

PRIORITY_CYCLE = list(Priority)


def next_priority(current: Priority | None) -> Priority:
    """Priority after ``current`` in low -> urgent order, wrapping around."""
    if current is None:
        return PRIORITY_CYCLE[0]
    index = PRIORITY_CYCLE.index(current)
    return PRIORITY_CYCLE[(index + 1) % len(PRIORITY_CYCLE)]


@asynccontextmanager
async def _wrap(action: str) -> AsyncIterator[None]:
    try:
        yield
    except (TaskdenError, ValueError) as e:
        logger.warning("tui_action_failed", action=action, error=str(e))
        raise TUIDataError(f"Failed to {action}", original_exception=e) from e


class TaskdenDataService:
    """Service layer between the TUI screens and the repositories."""

    def __init__(self, db: Database) -> None:
        """Initialize the data service.

        Args:
            db: Database instance (initialized lazily by ``initialize``)
        """
        self.db = db
        self.tasks = TaskRepository(db)
        self.areas = AreaRepository(db)
        self.notes = NoteRepository(db)

    @classmethod
    def from_path(cls, db_path: Path | str) -> "TaskdenDataService":
        return cls(Database(db_path))

    async def initialize(self) -> None:
        async with _wrap("open database"):
            await self.db.initialize()

    async def close(self) -> None:
        await self.db.close()

    # ===== Listing =====

    async def fetch_tasks(self, include_archived: bool = False) -> list[TaskRow]:
        async with _wrap("load tasks"):
            return await self.tasks.read_all(include_archived=include_archived)

    async def fetch_areas(self, include_archived: bool = False) -> list[AreaRow]:
        async with _wrap("load areas"):
            return await self.areas.read_all(include_archived=include_archived)

    async def fetch_notes(self) -> list[NoteRow]:
        async with _wrap("load notes"):
            return await self.notes.read_everything()

    async def note_paths_for(self, parent: TaskParent | AreaParent) -> list[str]:
        async with _wrap("load notes"):
            return [note.path for note in await self.notes.read_for_parent(parent)]

    async def note_path(self, note_id: int) -> str | None:
        async with _wrap("load note"):
            note = await self.notes.read_by_id(note_id)
        return note.path if note else None

    # ===== Changes =====

    async def set_task_status(self, task_id: int, status: Status) -> None:
        async with _wrap("update task status"):
            await self.tasks.update(task_id, TaskUpdate(status=status))

    async def set_area_status(self, area_id: int, status: Status) -> None:
        async with _wrap("update area status"):
            await self.areas.update(area_id, AreaUpdate(status=status))

    async def cycle_task_priority(self, task_id: int, current: Priority | None) -> Priority:
        priority = next_priority(current)
        async with _wrap("update task priority"):
            await self.tasks.update(task_id, TaskUpdate(priority=priority))
        return priority

    async def set_task_archived(self, task_id: int, archived: bool) -> None:
        async with _wrap("archive task"):
            await self.tasks.update(task_id, TaskUpdate(archived=archived))

    async def set_area_archived(self, area_id: int, archived: bool) -> None:
        async with _wrap("archive area"):
            await self.areas.update(area_id, AreaUpdate(archived=archived))

    async def create_task(
        self,
        title: str,
        priority: Priority | None = None,
        status: Status | None = None,
        due_date: datetime | None = None,
        description: str | None = None,
    ) -> int:
        async with _wrap("create task"):
            task = Task(
                title=title,
                priority=priority,
                status=status,
                due_date=due_date,
                description=description,
            )
            return await self.tasks.create(task)

    async def create_area(
        self, title: str, status: Status | None = None, due_date: datetime | None = None
    ) -> int:
        async with _wrap("create area"):
            return await self.areas.create(Area(title=title, status=status, due_date=due_date))

    async def create_note(self, title: str, path: str, parent: TaskParent | AreaParent) -> int:
        async with _wrap("create note"):
            return await self.notes.create(Note(title=title, path=path), parent)

    async def delete_task(self, task_id: int) -> None:
        async with _wrap("delete task"):
            await self.tasks.delete(task_id)

    async def delete_area(self, area_id: int) -> None:
        async with _wrap("delete area"):
            await self.areas.delete(area_id)

    async def delete_note(self, note_id: int) -> None:
        async with _wrap("delete note"):
            await self.notes.delete(note_id)
