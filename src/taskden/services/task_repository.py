"""Task persistence: CRUD plus cascading note cleanup."""

from collections.abc import Iterable
from typing import Any

from taskden.domain.models import Task, TaskRow, TaskUpdate, default_due_date
from taskden.infrastructure.database import Database
from taskden.infrastructure.exceptions import NoFieldsToUpdateError, TaskNotFoundError
from taskden.infrastructure.logger import get_logger
from taskden.infrastructure.queries import Queries
from taskden.services.common import check_id, check_ids, read_session, write_transaction

logger = get_logger(__name__)

ENTITY = "task"

# Field name (as used by the CLI) -> single-column setter
FIELD_SETTERS = {
    "title": Queries.update_task_title,
    "description": Queries.update_task_description,
    "priority": Queries.update_task_priority,
    "status": Queries.update_task_status,
    "archived": Queries.update_task_archived,
    "due_date": Queries.update_task_due_date,
    "area_id": Queries.update_task_area,
}


class TaskRepository:
    """Create, read, update and delete tasks.

    Deleting a task also deletes every note linked to it through
    bridge_notes, in the same transaction.
    """

    def __init__(self, db: Database) -> None:
        """Initialize task repository.

        Args:
            db: Database instance for storage operations
        """
        self.db = db

    async def create(self, task: Task) -> int:
        """Insert a task and return its new id.

        ``due_date`` defaults to seven days after ``created_at``.

        Raises:
            ConstraintError: If the row violates a constraint (e.g. unknown area_id)
        """
        record = task.model_copy(
            update={
                "id": None,
                "last_mod": task.created_at,
                "due_date": task.due_date or default_due_date(task.created_at),
            }
        )
        async with write_transaction(self.db, "create task") as q:
            task_id = await q.create_task(record)

        logger.info("task_created", task_id=task_id, title=record.title)
        return task_id

    async def read(self, task_id: int) -> Task:
        """Read one task with its linked notes.

        Raises:
            InvalidIDError: If task_id is not positive
            TaskNotFoundError: If no task has this id
        """
        check_id(ENTITY, task_id)
        async with read_session(self.db, "read task") as q:
            task = await q.read_task(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            task.notes = await q.read_task_notes(task_id)
        return task

    async def read_all(self, include_archived: bool = True) -> list[TaskRow]:
        """List tasks with their age in days and comma-joined note titles."""
        async with read_session(self.db, "list tasks") as q:
            return await q.read_tasks(include_archived=include_archived)

    async def update(self, task_id: int, changes: TaskUpdate) -> int:
        """Apply the fields set on ``changes`` and return the rows affected.

        Raises:
            InvalidIDError: If task_id is not positive
            NoFieldsToUpdateError: If ``changes`` sets no field (nothing is written)
            ConstraintError: If the new values violate a constraint
        """
        check_id(ENTITY, task_id)
        if changes.is_empty():
            raise NoFieldsToUpdateError(ENTITY, task_id)

        fields = changes.changes()
        async with write_transaction(self.db, "update task") as q:
            count = await q.update_task(task_id, fields)

        logger.info("task_updated", task_id=task_id, fields=sorted(fields), rows=count)
        return count

    async def set_field(self, task_id: int, field: str, value: Any) -> None:
        """Set (or clear, with None) a single column.

        The value is validated the same way as ``TaskUpdate`` fields.

        Raises:
            ValueError: If the field is unknown or the value invalid
            TaskNotFoundError: If no task has this id
        """
        check_id(ENTITY, task_id)
        setter = FIELD_SETTERS.get(field)
        if setter is None:
            raise ValueError(f"unknown task field: {field}")
        validated = getattr(TaskUpdate.model_validate({field: value}), field)

        async with write_transaction(self.db, f"set task {field}") as q:
            count = await setter(q, task_id, validated)
            if count == 0:
                raise TaskNotFoundError(task_id)

        logger.info("task_field_set", task_id=task_id, field=field)

    async def assign_area(self, task_id: int, area_id: int | None) -> None:
        """Move a task into an area, or out of any area with None.

        Raises:
            TaskNotFoundError: If no task has this id
            ConstraintError: If the area does not exist
        """
        check_id(ENTITY, task_id)
        if area_id is not None:
            check_id("area", area_id)
        async with write_transaction(self.db, "assign task area") as q:
            if await q.update_task_area(task_id, area_id) == 0:
                raise TaskNotFoundError(task_id)

        logger.info("task_area_assigned", task_id=task_id, area_id=area_id)

    async def delete(self, task_id: int) -> None:
        """Delete a task, its bridge rows and the notes they reference.

        Raises:
            InvalidIDError: If task_id is not positive (nothing is touched)
            TaskNotFoundError: If no task has this id (rolled back)
        """
        check_id(ENTITY, task_id)
        async with write_transaction(self.db, "delete task") as q:
            notes_deleted = await q.delete_task_notes([task_id])
            await q.delete_task_bridge_notes([task_id])
            if await q.delete_task(task_id) == 0:
                raise TaskNotFoundError(task_id)

        logger.info("task_deleted", task_id=task_id, notes_deleted=notes_deleted)

    async def delete_multiple(self, task_ids: Iterable[int]) -> int:
        """Delete several tasks and their notes atomically.

        Either every listed task is deleted or none is.

        Returns:
            Number of tasks deleted

        Raises:
            EmptyIDListError: If no ids were given
            InvalidIDError: If any id is not positive
            TaskNotFoundError: If any id does not exist (rolled back)
        """
        ids = check_ids(ENTITY, task_ids)
        async with write_transaction(self.db, "delete tasks") as q:
            notes_deleted = await q.delete_task_notes(ids)
            await q.delete_task_bridge_notes(ids)
            deleted = await q.delete_tasks(ids)
            if deleted < len(ids):
                raise TaskNotFoundError(ids)

        logger.info("tasks_deleted", task_ids=ids, notes_deleted=notes_deleted)
        return deleted
