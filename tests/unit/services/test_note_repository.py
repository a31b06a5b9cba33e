"""Unit tests for NoteRepository and the bridge linker."""

import pytest

from taskden.domain.models import AreaParent, Note, NoteType, TaskParent
from taskden.infrastructure.exceptions import (
    ConstraintError,
    EmptyIDListError,
    InvalidIDError,
    InvalidNoteTypeError,
    NoteNotFoundError,
)
from taskden.services import coerce_note_type, parent_for


class TestNoteTypeHelpers:
    """Tests for category coercion."""

    @pytest.mark.parametrize(("value", "expected"), [(1, NoteType.TASK), (2, NoteType.AREA)])
    def test_coerce(self, value, expected):
        assert coerce_note_type(value) is expected

    @pytest.mark.parametrize("value", [0, 3, "task", None, True])
    def test_coerce_rejects(self, value):
        with pytest.raises(InvalidNoteTypeError):
            coerce_note_type(value)

    def test_parent_for(self):
        assert parent_for(1, 4) == TaskParent(id=4)
        assert parent_for(NoteType.AREA, 2) == AreaParent(id=2)

    def test_parent_for_invalid_id(self):
        with pytest.raises(InvalidIDError):
            parent_for(1, 0)


@pytest.mark.asyncio
async def test_create_links_note_to_task(memory_db, note_repo, task_id):
    note_id = await note_repo.create(Note(title="Outline", path="/o.md"), TaskParent(id=task_id))

    note = await note_repo.read_by_id(note_id)

    assert note is not None
    assert note.title == "Outline"
    assert note.path == "/o.md"
    assert note.note_type is NoteType.TASK
    assert (await memory_db.table_counts())["bridge_notes"] == 1


@pytest.mark.asyncio
async def test_create_with_missing_parent_rolls_back(memory_db, note_repo):
    with pytest.raises(ConstraintError):
        await note_repo.create(Note(title="Lost", path="/l.md"), AreaParent(id=12))

    counts = await memory_db.table_counts()
    assert counts["notes"] == 0
    assert counts["bridge_notes"] == 0


@pytest.mark.asyncio
async def test_read_by_id_missing_returns_none(note_repo):
    assert await note_repo.read_by_id(123) is None


@pytest.mark.asyncio
async def test_read_by_id_invalid(note_repo):
    with pytest.raises(InvalidIDError):
        await note_repo.read_by_id(0)


@pytest.mark.asyncio
async def test_read_all_by_category(note_repo, task_id, area_id):
    await note_repo.create(Note(title="Task note", path="/t.md"), TaskParent(id=task_id))
    await note_repo.create(Note(title="Area note", path="/a.md"), AreaParent(id=area_id))

    task_rows = await note_repo.read_all(NoteType.TASK)
    area_rows = await note_repo.read_all(2)

    assert [(row.title, row.link_title, row.parent_id) for row in task_rows] == [
        ("Task note", "Write report", task_id)
    ]
    assert [(row.title, row.link_title, row.parent_id) for row in area_rows] == [
        ("Area note", "Home", area_id)
    ]
    assert area_rows[0].note_type is NoteType.AREA


@pytest.mark.asyncio
async def test_read_all_unsupported_category(note_repo):
    with pytest.raises(InvalidNoteTypeError):
        await note_repo.read_all(3)


@pytest.mark.asyncio
async def test_read_everything_and_for_parent(note_repo, task_id, area_id):
    await note_repo.create(Note(title="First", path="/1"), AreaParent(id=area_id))
    await note_repo.create(Note(title="Second", path="/2"), TaskParent(id=task_id))

    rows = await note_repo.read_everything()
    task_notes = await note_repo.read_for_parent(TaskParent(id=task_id))

    assert [row.link_title for row in rows] == ["Home", "Write report"]
    assert [note.title for note in task_notes] == ["Second"]


@pytest.mark.asyncio
async def test_link_moves_note(note_repo, task_id, area_id):
    note_id = await note_repo.create(Note(title="Moving", path="/m"), TaskParent(id=task_id))

    await note_repo.link(note_id, AreaParent(id=area_id))

    assert await note_repo.read_for_parent(TaskParent(id=task_id)) == []
    assert [n.id for n in await note_repo.read_for_parent(AreaParent(id=area_id))] == [note_id]


@pytest.mark.asyncio
async def test_link_missing_note(note_repo, task_id):
    with pytest.raises(NoteNotFoundError):
        await note_repo.link(77, TaskParent(id=task_id))


@pytest.mark.asyncio
async def test_link_to_missing_parent_keeps_old_link(note_repo, task_id):
    note_id = await note_repo.create(Note(title="Stay", path="/s"), TaskParent(id=task_id))

    with pytest.raises(ConstraintError):
        await note_repo.link(note_id, AreaParent(id=55))

    assert [n.id for n in await note_repo.read_for_parent(TaskParent(id=task_id))] == [note_id]


@pytest.mark.asyncio
async def test_delete_removes_bridge_row(memory_db, note_repo, task_id):
    note_id = await note_repo.create(Note(title="Gone", path="/g"), TaskParent(id=task_id))

    await note_repo.delete(note_id)

    assert await note_repo.read_by_id(note_id) is None
    assert (await memory_db.table_counts())["bridge_notes"] == 0

    with pytest.raises(NoteNotFoundError):
        await note_repo.delete(note_id)


@pytest.mark.asyncio
async def test_delete_notes(note_repo, task_id):
    ids = [
        await note_repo.create(Note(title=f"N{i}", path=f"/{i}"), TaskParent(id=task_id))
        for i in range(3)
    ]

    assert await note_repo.delete_notes([ids[0], ids[1]]) == 2
    assert [row.id for row in await note_repo.read_everything()] == [ids[2]]

    with pytest.raises(EmptyIDListError):
        await note_repo.delete_notes([])


@pytest.mark.asyncio
async def test_delete_notes_with_missing_id_deletes_nothing(note_repo, task_id):
    first = await note_repo.create(Note(title="Keep 1", path="/k1"), TaskParent(id=task_id))
    second = await note_repo.create(Note(title="Keep 2", path="/k2"), TaskParent(id=task_id))

    with pytest.raises(NoteNotFoundError) as exc_info:
        await note_repo.delete_notes([first, second, 999])

    assert exc_info.value.ids == [first, second, 999]
    assert sorted(row.id for row in await note_repo.read_everything()) == [first, second]
