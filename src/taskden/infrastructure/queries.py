"""Typed query facade over the taskden schema.

Every statement lives here as a constant; ``Queries`` binds parameters,
converts rows to domain models and never commits. Callers own the
transaction (see ``Database.transaction``).
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from enum import Enum
from typing import Any

from aiosqlite import Connection, Row

from taskden.domain.models import (
    Area,
    AreaRow,
    BridgeNote,
    Note,
    NoteRow,
    Task,
    TaskRow,
)

# ===== Column whitelists for dynamic UPDATE statements =====

TASK_COLUMNS = ("title", "description", "priority", "status", "archived", "due_date", "area_id")
AREA_COLUMNS = ("title", "status", "archived", "due_date")

# ===== Statements =====

CREATE_TASK = """
INSERT INTO tasks (title, description, priority, status, archived,
                   created_at, last_mod, due_date, area_id)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

CREATE_AREA = """
INSERT INTO areas (title, status, archived, created_at, last_mod, due_date)
VALUES (?, ?, ?, ?, ?, ?)
"""

CREATE_NOTE = "INSERT INTO notes (title, path) VALUES (?, ?)"

CREATE_TASK_BRIDGE_NOTE = """
INSERT INTO bridge_notes (note_id, parent_cat, parent_task_id) VALUES (?, 1, ?)
"""

CREATE_AREA_BRIDGE_NOTE = """
INSERT INTO bridge_notes (note_id, parent_cat, parent_area_id) VALUES (?, 2, ?)
"""

TASK_FIELDS = """
id, title, description, priority, status, archived, created_at, last_mod, due_date, area_id
"""

READ_TASK = f"SELECT {TASK_FIELDS} FROM tasks WHERE id = ?"

READ_AREA_TASKS = f"SELECT {TASK_FIELDS} FROM tasks WHERE area_id = ? ORDER BY id"

READ_TASKS = """
SELECT t.id, t.title, t.priority, t.status, t.archived, t.area_id,
       ROUND(julianday('now') - julianday(t.created_at), 2) AS age_in_days,
       COALESCE((
           SELECT GROUP_CONCAT(title, ', ') FROM (
               SELECT n.title FROM bridge_notes b
               JOIN notes n ON n.id = b.note_id
               WHERE b.parent_cat = 1 AND b.parent_task_id = t.id
               ORDER BY n.id
           )
       ), '') AS note_titles
FROM tasks t
WHERE (? = 1 OR t.archived = 0)
ORDER BY t.id
"""

READ_AREA = """
SELECT id, title, status, archived, created_at, last_mod, due_date
FROM areas WHERE id = ?
"""

READ_AREAS = """
SELECT a.id, a.title, a.status, a.archived,
       ROUND(julianday('now') - julianday(a.created_at), 2) AS age_in_days,
       COALESCE((
           SELECT GROUP_CONCAT(title, ', ') FROM (
               SELECT n.title FROM bridge_notes b
               JOIN notes n ON n.id = b.note_id
               WHERE b.parent_cat = 2 AND b.parent_area_id = a.id
               ORDER BY n.id
           )
       ), '') AS note_titles
FROM areas a
WHERE (? = 1 OR a.archived = 0)
ORDER BY a.id
"""

READ_TASK_NOTES = """
SELECT n.id, n.title, n.path, b.parent_cat AS note_type
FROM notes n
JOIN bridge_notes b ON b.note_id = n.id
WHERE b.parent_cat = 1 AND b.parent_task_id = ?
ORDER BY n.id
"""

READ_AREA_NOTES = """
SELECT n.id, n.title, n.path, b.parent_cat AS note_type
FROM notes n
JOIN bridge_notes b ON b.note_id = n.id
WHERE b.parent_cat = 2 AND b.parent_area_id = ?
ORDER BY n.id
"""

READ_NOTE_BY_ID = """
SELECT n.id, n.title, n.path, b.parent_cat AS note_type
FROM notes n
LEFT JOIN bridge_notes b ON b.note_id = n.id
WHERE n.id = ?
"""

READ_BRIDGE_NOTE = """
SELECT note_id, parent_cat, parent_task_id, parent_area_id
FROM bridge_notes WHERE note_id = ?
"""

READ_ALL_TASK_NOTES = """
SELECT n.id, n.title, n.path, t.title AS link_title,
       t.id AS parent_id, b.parent_cat AS note_type
FROM notes n
JOIN bridge_notes b ON b.note_id = n.id
JOIN tasks t ON t.id = b.parent_task_id
WHERE b.parent_cat = 1
ORDER BY n.id
"""

READ_ALL_AREA_NOTES = """
SELECT n.id, n.title, n.path, a.title AS link_title,
       a.id AS parent_id, b.parent_cat AS note_type
FROM notes n
JOIN bridge_notes b ON b.note_id = n.id
JOIN areas a ON a.id = b.parent_area_id
WHERE b.parent_cat = 2
ORDER BY n.id
"""

READ_ALL_NOTES = """
SELECT n.id, n.title, n.path,
       COALESCE(t.title, a.title) AS link_title,
       COALESCE(b.parent_task_id, b.parent_area_id) AS parent_id,
       b.parent_cat AS note_type
FROM notes n
JOIN bridge_notes b ON b.note_id = n.id
LEFT JOIN tasks t ON b.parent_cat = 1 AND t.id = b.parent_task_id
LEFT JOIN areas a ON b.parent_cat = 2 AND a.id = b.parent_area_id
ORDER BY n.id
"""

DELETE_TASKS = "DELETE FROM tasks WHERE id IN ({ids})"

DELETE_AREAS = "DELETE FROM areas WHERE id IN ({ids})"

DELETE_NOTES = "DELETE FROM notes WHERE id IN ({ids})"

DELETE_TASK_NOTES = """
DELETE FROM notes WHERE id IN (
    SELECT note_id FROM bridge_notes
    WHERE parent_cat = 1 AND parent_task_id IN ({ids})
)
"""

DELETE_AREA_NOTES = """
DELETE FROM notes WHERE id IN (
    SELECT note_id FROM bridge_notes
    WHERE parent_cat = 2 AND parent_area_id IN ({ids})
)
"""

DELETE_TASK_BRIDGE_NOTES = (
    "DELETE FROM bridge_notes WHERE parent_cat = 1 AND parent_task_id IN ({ids})"
)

DELETE_AREA_BRIDGE_NOTES = (
    "DELETE FROM bridge_notes WHERE parent_cat = 2 AND parent_area_id IN ({ids})"
)

DELETE_BRIDGE_NOTE = "DELETE FROM bridge_notes WHERE note_id = ?"


def to_db_value(value: Any) -> Any:
    """Convert a model value into something sqlite3 binds natively."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    return value


def expand_ids(sql: str, ids: Iterable[int]) -> tuple[str, tuple[int, ...]]:
    """Expand the ``{ids}`` placeholder into one ``?`` per id.

    An empty sequence expands to ``NULL`` so the IN-list matches nothing.
    """
    params = tuple(ids)
    placeholders = ", ".join("?" for _ in params) if params else "NULL"
    return sql.format(ids=placeholders), params


def _row(row: Row) -> dict[str, Any]:
    return {key: row[key] for key in row.keys()}


class Queries:
    """Statement wrappers bound to one open connection."""

    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    async def _insert(self, sql: str, params: Sequence[Any]) -> int:
        cursor = await self.conn.execute(sql, tuple(to_db_value(p) for p in params))
        assert cursor.lastrowid is not None
        return int(cursor.lastrowid)

    async def _write(self, sql: str, params: Sequence[Any]) -> int:
        cursor = await self.conn.execute(sql, tuple(to_db_value(p) for p in params))
        return cursor.rowcount

    async def _fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        cursor = await self.conn.execute(sql, tuple(params))
        return [_row(r) for r in await cursor.fetchall()]

    async def _fetchone(self, sql: str, params: Sequence[Any]) -> dict[str, Any] | None:
        cursor = await self.conn.execute(sql, tuple(params))
        row = await cursor.fetchone()
        return _row(row) if row is not None else None

    # ===== Create =====

    async def create_task(self, task: Task) -> int:
        return await self._insert(
            CREATE_TASK,
            (
                task.title,
                task.description,
                task.priority,
                task.status,
                task.archived,
                task.created_at,
                task.last_mod,
                task.due_date,
                task.area_id,
            ),
        )

    async def create_area(self, area: Area) -> int:
        return await self._insert(
            CREATE_AREA,
            (area.title, area.status, area.archived, area.created_at, area.last_mod, area.due_date),
        )

    async def create_note(self, title: str, path: str) -> int:
        return await self._insert(CREATE_NOTE, (title, path))

    async def create_task_bridge_note(self, note_id: int, task_id: int) -> int:
        return await self._insert(CREATE_TASK_BRIDGE_NOTE, (note_id, task_id))

    async def create_area_bridge_note(self, note_id: int, area_id: int) -> int:
        return await self._insert(CREATE_AREA_BRIDGE_NOTE, (note_id, area_id))

    # ===== Read =====

    async def read_task(self, task_id: int) -> Task | None:
        row = await self._fetchone(READ_TASK, (task_id,))
        return Task.model_validate(row) if row else None

    async def read_tasks(self, include_archived: bool = True) -> list[TaskRow]:
        rows = await self._fetchall(READ_TASKS, (int(include_archived),))
        return [TaskRow.model_validate(r) for r in rows]

    async def read_area(self, area_id: int) -> Area | None:
        row = await self._fetchone(READ_AREA, (area_id,))
        return Area.model_validate(row) if row else None

    async def read_areas(self, include_archived: bool = True) -> list[AreaRow]:
        rows = await self._fetchall(READ_AREAS, (int(include_archived),))
        return [AreaRow.model_validate(r) for r in rows]

    async def read_task_notes(self, task_id: int) -> list[Note]:
        rows = await self._fetchall(READ_TASK_NOTES, (task_id,))
        return [Note.model_validate(r) for r in rows]

    async def read_area_notes(self, area_id: int) -> list[Note]:
        rows = await self._fetchall(READ_AREA_NOTES, (area_id,))
        return [Note.model_validate(r) for r in rows]

    async def read_area_tasks(self, area_id: int) -> list[Task]:
        rows = await self._fetchall(READ_AREA_TASKS, (area_id,))
        return [Task.model_validate(r) for r in rows]

    async def read_note_by_id(self, note_id: int) -> Note | None:
        row = await self._fetchone(READ_NOTE_BY_ID, (note_id,))
        return Note.model_validate(row) if row else None

    async def read_bridge_note(self, note_id: int) -> BridgeNote | None:
        row = await self._fetchone(READ_BRIDGE_NOTE, (note_id,))
        return BridgeNote.model_validate(row) if row else None

    async def read_all_notes(self) -> list[NoteRow]:
        rows = await self._fetchall(READ_ALL_NOTES)
        return [NoteRow.model_validate(r) for r in rows]

    async def read_all_task_notes(self) -> list[NoteRow]:
        rows = await self._fetchall(READ_ALL_TASK_NOTES)
        return [NoteRow.model_validate(r) for r in rows]

    async def read_all_area_notes(self) -> list[NoteRow]:
        rows = await self._fetchall(READ_ALL_AREA_NOTES)
        return [NoteRow.model_validate(r) for r in rows]

    # ===== Update =====

    async def _update_columns(
        self, table: str, allowed: Sequence[str], row_id: int, changes: Mapping[str, Any]
    ) -> int:
        unknown = set(changes) - set(allowed)
        if unknown:
            raise ValueError(f"unknown {table} column(s): {', '.join(sorted(unknown))}")
        if not changes:
            return 0
        assignments = ", ".join(f"{column} = ?" for column in changes)
        params = [*changes.values(), row_id]
        return await self._write(f"UPDATE {table} SET {assignments} WHERE id = ?", params)

    async def update_task(self, task_id: int, changes: Mapping[str, Any]) -> int:
        """Update several task columns in one statement."""
        return await self._update_columns("tasks", TASK_COLUMNS, task_id, changes)

    async def update_area(self, area_id: int, changes: Mapping[str, Any]) -> int:
        """Update several area columns in one statement."""
        return await self._update_columns("areas", AREA_COLUMNS, area_id, changes)

    async def update_task_title(self, task_id: int, title: str) -> int:
        return await self.update_task(task_id, {"title": title})

    async def update_task_description(self, task_id: int, description: str | None) -> int:
        return await self.update_task(task_id, {"description": description})

    async def update_task_priority(self, task_id: int, priority: Any) -> int:
        return await self.update_task(task_id, {"priority": priority})

    async def update_task_status(self, task_id: int, status: str | None) -> int:
        return await self.update_task(task_id, {"status": status})

    async def update_task_archived(self, task_id: int, archived: bool) -> int:
        return await self.update_task(task_id, {"archived": archived})

    async def update_task_due_date(self, task_id: int, due_date: datetime | None) -> int:
        return await self.update_task(task_id, {"due_date": due_date})

    async def update_task_area(self, task_id: int, area_id: int | None) -> int:
        return await self.update_task(task_id, {"area_id": area_id})

    async def update_area_title(self, area_id: int, title: str) -> int:
        return await self.update_area(area_id, {"title": title})

    async def update_area_status(self, area_id: int, status: str | None) -> int:
        return await self.update_area(area_id, {"status": status})

    async def update_area_archived(self, area_id: int, archived: bool) -> int:
        return await self.update_area(area_id, {"archived": archived})

    async def update_area_due_date(self, area_id: int, due_date: datetime | None) -> int:
        return await self.update_area(area_id, {"due_date": due_date})

    # ===== Delete =====

    async def _delete_in(self, sql: str, ids: Iterable[int]) -> int:
        statement, params = expand_ids(sql, ids)
        return await self._write(statement, params)

    async def delete_task(self, task_id: int) -> int:
        return await self._delete_in(DELETE_TASKS, [task_id])

    async def delete_tasks(self, task_ids: Iterable[int]) -> int:
        return await self._delete_in(DELETE_TASKS, task_ids)

    async def delete_area(self, area_id: int) -> int:
        return await self._delete_in(DELETE_AREAS, [area_id])

    async def delete_areas(self, area_ids: Iterable[int]) -> int:
        return await self._delete_in(DELETE_AREAS, area_ids)

    async def delete_task_notes(self, task_ids: Iterable[int]) -> int:
        """Delete the notes linked to the given tasks."""
        return await self._delete_in(DELETE_TASK_NOTES, task_ids)

    async def delete_area_notes(self, area_ids: Iterable[int]) -> int:
        """Delete the notes linked to the given areas."""
        return await self._delete_in(DELETE_AREA_NOTES, area_ids)

    async def delete_note(self, note_id: int) -> int:
        return await self._delete_in(DELETE_NOTES, [note_id])

    async def delete_notes(self, note_ids: Iterable[int]) -> int:
        return await self._delete_in(DELETE_NOTES, note_ids)

    async def delete_task_bridge_notes(self, task_ids: Iterable[int]) -> int:
        return await self._delete_in(DELETE_TASK_BRIDGE_NOTES, task_ids)

    async def delete_area_bridge_notes(self, area_ids: Iterable[int]) -> int:
        return await self._delete_in(DELETE_AREA_BRIDGE_NOTES, area_ids)

    async def delete_bridge_note(self, note_id: int) -> int:
        return await self._write(DELETE_BRIDGE_NOTE, (note_id,))
