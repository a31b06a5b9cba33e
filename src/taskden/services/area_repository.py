"""Area persistence: CRUD, task membership and cascading note cleanup."""

from collections.abc import Iterable
from typing import Any

from taskden.domain.models import Area, AreaRow, AreaUpdate, default_due_date
from taskden.infrastructure.database import Database
from taskden.infrastructure.exceptions import (
    AreaNotFoundError,
    NoFieldsToUpdateError,
    TaskNotFoundError,
)
from taskden.infrastructure.logger import get_logger
from taskden.infrastructure.queries import Queries
from taskden.services.common import check_id, check_ids, read_session, write_transaction

logger = get_logger(__name__)

ENTITY = "area"

FIELD_SETTERS = {
    "title": Queries.update_area_title,
    "status": Queries.update_area_status,
    "archived": Queries.update_area_archived,
    "due_date": Queries.update_area_due_date,
}


class AreaRepository:
    """Create, read, update and delete areas.

    Deleting an area deletes the notes linked to it; its tasks are kept
    and lose their area (area_id becomes NULL).
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    async def create(self, area: Area) -> int:
        """Insert an area and return its new id."""
        record = area.model_copy(
            update={
                "id": None,
                "last_mod": area.created_at,
                "due_date": area.due_date or default_due_date(area.created_at),
            }
        )
        async with write_transaction(self.db, "create area") as q:
            area_id = await q.create_area(record)

        logger.info("area_created", area_id=area_id, title=record.title)
        return area_id

    async def read(self, area_id: int) -> Area:
        """Read one area with its notes and tasks.

        Raises:
            InvalidIDError: If area_id is not positive
            AreaNotFoundError: If no area has this id
        """
        check_id(ENTITY, area_id)
        async with read_session(self.db, "read area") as q:
            area = await q.read_area(area_id)
            if area is None:
                raise AreaNotFoundError(area_id)
            area.notes = await q.read_area_notes(area_id)
            area.tasks = await q.read_area_tasks(area_id)
        return area

    async def read_all(self, include_archived: bool = True) -> list[AreaRow]:
        """List areas; each row's ``notes`` is filled by a follow-up query."""
        async with read_session(self.db, "list areas") as q:
            rows = await q.read_areas(include_archived=include_archived)
            for row in rows:
                row.notes = await q.read_area_notes(row.id)
        return rows

    async def update(self, area_id: int, changes: AreaUpdate) -> int:
        """Apply the fields set on ``changes`` and return the rows affected.

        Raises:
            InvalidIDError: If area_id is not positive
            NoFieldsToUpdateError: If ``changes`` sets no field
        """
        check_id(ENTITY, area_id)
        if changes.is_empty():
            raise NoFieldsToUpdateError(ENTITY, area_id)

        fields = changes.changes()
        async with write_transaction(self.db, "update area") as q:
            count = await q.update_area(area_id, fields)

        logger.info("area_updated", area_id=area_id, fields=sorted(fields), rows=count)
        return count

    async def set_field(self, area_id: int, field: str, value: Any) -> None:
        """Set (or clear, with None) a single column."""
        check_id(ENTITY, area_id)
        setter = FIELD_SETTERS.get(field)
        if setter is None:
            raise ValueError(f"unknown area field: {field}")
        validated = getattr(AreaUpdate.model_validate({field: value}), field)

        async with write_transaction(self.db, f"set area {field}") as q:
            if await setter(q, area_id, validated) == 0:
                raise AreaNotFoundError(area_id)

        logger.info("area_field_set", area_id=area_id, field=field)

    async def add_task(self, area_id: int, task_id: int) -> None:
        """Put an existing task into this area.

        Raises:
            AreaNotFoundError: If the area does not exist
            TaskNotFoundError: If the task does not exist
        """
        check_id(ENTITY, area_id)
        check_id("task", task_id)
        async with write_transaction(self.db, "add task to area") as q:
            if await q.read_area(area_id) is None:
                raise AreaNotFoundError(area_id)
            if await q.update_task_area(task_id, area_id) == 0:
                raise TaskNotFoundError(task_id)

        logger.info("area_task_added", area_id=area_id, task_id=task_id)

    async def delete(self, area_id: int) -> None:
        """Delete an area, its bridge rows and the notes they reference.

        Raises:
            InvalidIDError: If area_id is not positive
            AreaNotFoundError: If no area has this id (rolled back)
        """
        check_id(ENTITY, area_id)
        async with write_transaction(self.db, "delete area") as q:
            notes_deleted = await q.delete_area_notes([area_id])
            await q.delete_area_bridge_notes([area_id])
            if await q.delete_area(area_id) == 0:
                raise AreaNotFoundError(area_id)

        logger.info("area_deleted", area_id=area_id, notes_deleted=notes_deleted)

    async def delete_multiple(self, area_ids: Iterable[int]) -> int:
        """Delete several areas and their notes; all or nothing."""
        ids = check_ids(ENTITY, area_ids)
        async with write_transaction(self.db, "delete areas") as q:
            notes_deleted = await q.delete_area_notes(ids)
            await q.delete_area_bridge_notes(ids)
            deleted = await q.delete_areas(ids)
            if deleted < len(ids):
                raise AreaNotFoundError(ids)

        logger.info("areas_deleted", area_ids=ids, notes_deleted=notes_deleted)
        return deleted
