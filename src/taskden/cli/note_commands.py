"""Note management commands."""

import asyncio

import typer
from rich.table import Table

from taskden.cli.utils import cli_errors, console, get_state, open_database, parse_ids
from taskden.domain.models import AreaParent, Note, NoteRow, NoteType, TaskParent
from taskden.infrastructure.editor import open_in_editor
from taskden.infrastructure.exceptions import NoteNotFoundError
from taskden.services import NoteRepository

note_app = typer.Typer(help="Note management", no_args_is_help=True)

NOTE_TYPES = {"task": NoteType.TASK, "area": NoteType.AREA, "all": None}


@note_app.command("add")
def add_note(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Note title"),
    path: str = typer.Argument(..., help="Path to the note file"),
    task: int | None = typer.Option(None, "--task", help="Link the note to this task"),
    area: int | None = typer.Option(None, "--area", help="Link the note to this area"),
) -> None:
    """Register a note file and link it to a task or an area.

    Examples:
        taskden note add "Meeting notes" ~/notes/meeting.md --task 3
        taskden note add "Budget" budget.md --area 1
    """
    state = get_state(ctx)
    if (task is None) == (area is None):
        raise typer.BadParameter("Pass exactly one of --task or --area")

    async def _add() -> int:
        parent = TaskParent(id=task) if task is not None else AreaParent(id=area)
        async with open_database(state) as db:
            return await NoteRepository(db).create(Note(title=title, path=path), parent)

    with cli_errors():
        note_id = asyncio.run(_add())
    console.print(f"[green]✓[/green] Note created: [cyan]{note_id}[/cyan]")


def _notes_table(rows: list[NoteRow]) -> Table:
    table = Table(title="Notes")
    table.add_column("ID", style="cyan", no_wrap=True, justify="right")
    table.add_column("Title", style="magenta")
    table.add_column("Type", style="yellow")
    table.add_column("Linked To", style="green")
    table.add_column("Path", style="dim")
    for row in rows:
        table.add_row(
            str(row.id),
            row.title,
            str(row.note_type),
            f"{row.link_title} ({row.parent_id})",
            row.path,
        )
    return table


@note_app.command("list")
def list_notes(
    ctx: typer.Context,
    note_type: str = typer.Option("all", "--type", "-t", help="task|area|all"),
) -> None:
    """List notes with the task or area they belong to."""
    state = get_state(ctx)
    key = note_type.lower()
    if key not in NOTE_TYPES:
        valid_values = ", ".join(NOTE_TYPES)
        raise typer.BadParameter(f"Invalid note type '{note_type}'. Valid values: {valid_values}")

    async def _list() -> None:
        async with open_database(state) as db:
            repository = NoteRepository(db)
            parent_type = NOTE_TYPES[key]
            if parent_type is None:
                rows = await repository.read_everything()
            else:
                rows = await repository.read_all(parent_type)

        if not rows:
            console.print("[yellow]No notes found[/yellow]")
            return
        console.print(_notes_table(rows))

    with cli_errors():
        asyncio.run(_list())


@note_app.command("open")
def open_notes(
    ctx: typer.Context,
    note_ids: list[str] = typer.Argument(..., help="Note IDs to open together"),
) -> None:
    """Open one or more notes in the configured editor."""
    state = get_state(ctx)
    ids = parse_ids(note_ids)

    async def _open() -> None:
        async with open_database(state) as db:
            repository = NoteRepository(db)
            paths = []
            for note_id in ids:
                note = await repository.read_by_id(note_id)
                if note is None:
                    raise NoteNotFoundError(note_id)
                paths.append(note.path)
        await open_in_editor(paths, state.config)

    with cli_errors():
        asyncio.run(_open())


@note_app.command("delete")
def delete_notes(
    ctx: typer.Context,
    note_ids: list[str] = typer.Argument(..., help="Note IDs (space or comma separated)"),
) -> None:
    """Delete notes. Note files on disk are left alone."""
    state = get_state(ctx)
    ids = parse_ids(note_ids)

    async def _delete() -> int:
        async with open_database(state) as db:
            repository = NoteRepository(db)
            if len(ids) == 1:
                await repository.delete(ids[0])
                return 1
            return await repository.delete_notes(ids)

    with cli_errors():
        deleted = asyncio.run(_delete())
    console.print(f"[green]✓[/green] Deleted {deleted} note(s)")
