"""Note persistence and the bridge linking notes to a task or an area."""

from collections.abc import Iterable
from typing import Any

from taskden.domain.models import (
    AreaParent,
    Note,
    NoteRow,
    NoteType,
    TaskParent,
)
from taskden.infrastructure.database import Database
from taskden.infrastructure.exceptions import InvalidNoteTypeError, NoteNotFoundError
from taskden.infrastructure.logger import get_logger
from taskden.infrastructure.queries import Queries
from taskden.services.common import check_id, check_ids, read_session, write_transaction

logger = get_logger(__name__)

ENTITY = "note"


def coerce_note_type(value: Any) -> NoteType:
    """Turn 1/2 (or a NoteType) into a NoteType.

    Raises:
        InvalidNoteTypeError: For anything that is not a task or area category
    """
    if isinstance(value, bool):
        raise InvalidNoteTypeError(value)
    try:
        return NoteType(value)
    except ValueError as e:
        raise InvalidNoteTypeError(value) from e


def parent_for(note_type: Any, parent_id: int) -> TaskParent | AreaParent:
    """Build the parent reference for a category and id."""
    kind = coerce_note_type(note_type)
    check_id(kind.name.lower(), parent_id)
    if kind is NoteType.TASK:
        return TaskParent(id=parent_id)
    return AreaParent(id=parent_id)


async def _link(q: Queries, note_id: int, parent: TaskParent | AreaParent) -> None:
    if isinstance(parent, TaskParent):
        await q.create_task_bridge_note(note_id, parent.id)
    else:
        await q.create_area_bridge_note(note_id, parent.id)


class NoteRepository:
    """Create, list and delete notes and keep their bridge rows consistent.

    Every note has exactly one bridge row naming its parent. The note and
    its bridge row are written in one transaction, so a note never exists
    without a parent.
    """

    def __init__(self, db: Database) -> None:
        """Initialize note repository.

        Args:
            db: Database instance for storage operations
        """
        self.db = db

    async def create(self, note: Note, parent: TaskParent | AreaParent) -> int:
        """Insert a note linked to ``parent`` and return its id.

        Raises:
            ConstraintError: If the parent does not exist; the note insert is
                rolled back too
        """
        async with write_transaction(self.db, "create note") as q:
            note_id = await q.create_note(note.title, note.path)
            await _link(q, note_id, parent)

        logger.info(
            "bridge_link_created",
            note_id=note_id,
            parent_type=parent.kind,
            parent_id=parent.id,
        )
        return note_id

    async def read_by_id(self, note_id: int) -> Note | None:
        """Read one note; returns None when no note has this id."""
        check_id(ENTITY, note_id)
        async with read_session(self.db, "read note") as q:
            return await q.read_note_by_id(note_id)

    async def read_all(self, parent_type: Any) -> list[NoteRow]:
        """List notes of one parent category with their parent's title.

        Raises:
            InvalidNoteTypeError: If parent_type is not 1 (task) or 2 (area)
        """
        note_type = coerce_note_type(parent_type)
        async with read_session(self.db, "list notes") as q:
            if note_type is NoteType.TASK:
                return await q.read_all_task_notes()
            return await q.read_all_area_notes()

    async def read_everything(self) -> list[NoteRow]:
        """List notes of both categories, ordered by id."""
        async with read_session(self.db, "list notes") as q:
            return await q.read_all_notes()

    async def read_for_parent(self, parent: TaskParent | AreaParent) -> list[Note]:
        async with read_session(self.db, "list parent notes") as q:
            if isinstance(parent, TaskParent):
                return await q.read_task_notes(parent.id)
            return await q.read_area_notes(parent.id)

    async def link(self, note_id: int, parent: TaskParent | AreaParent) -> None:
        """Move an existing note to a new parent.

        Raises:
            NoteNotFoundError: If the note does not exist
            ConstraintError: If the new parent does not exist
        """
        check_id(ENTITY, note_id)
        async with write_transaction(self.db, "link note") as q:
            if await q.read_note_by_id(note_id) is None:
                raise NoteNotFoundError(note_id)
            await q.delete_bridge_note(note_id)
            await _link(q, note_id, parent)

        logger.info(
            "bridge_link_moved",
            note_id=note_id,
            parent_type=parent.kind,
            parent_id=parent.id,
        )

    async def delete(self, note_id: int) -> None:
        """Delete one note; its bridge row goes with it.

        Raises:
            NoteNotFoundError: If no note has this id
        """
        check_id(ENTITY, note_id)
        async with write_transaction(self.db, "delete note") as q:
            if await q.delete_note(note_id) == 0:
                raise NoteNotFoundError(note_id)

        logger.info("note_deleted", note_id=note_id)

    async def delete_notes(self, note_ids: Iterable[int]) -> int:
        """Delete several notes in one transaction and return how many went.

        Either every listed note is deleted or none is.

        Raises:
            EmptyIDListError: If no ids were given
            NoteNotFoundError: If any id does not exist (rolled back)
        """
        ids = check_ids(ENTITY, note_ids)
        async with write_transaction(self.db, "delete notes") as q:
            deleted = await q.delete_notes(ids)
            if deleted < len(ids):
                raise NoteNotFoundError(ids)

        logger.info("notes_deleted", note_ids=ids, deleted=deleted)
        return deleted
