"""Area management commands."""

import asyncio
from typing import Any

import typer
from rich.table import Table

from taskden.cli.utils import (
    cli_errors,
    console,
    format_date,
    get_state,
    is_clear_value,
    open_database,
    parse_bool,
    parse_due_date,
    parse_ids,
    parse_status,
)
from taskden.domain.models import Area
from taskden.services import AreaRepository

area_app = typer.Typer(help="Area management", no_args_is_help=True)

UPDATABLE_FIELDS = {
    "title": "title",
    "status": "status",
    "archived": "archived",
    "due": "due_date",
}


def _parse_field_value(field: str, value: str) -> Any:
    if field in {"status", "due"} and is_clear_value(value):
        return None
    if field == "status":
        return parse_status(value)
    if field == "archived":
        return parse_bool(value)
    if field == "due":
        return parse_due_date(value)
    return value


@area_app.command("add")
def add_area(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Area title"),
    status: str | None = typer.Option(None, "--status", "-s", help="todo|planning|doing|done"),
    due: str | None = typer.Option(None, "--due", help="Due date (YYYY-MM-DD, default: in 7 days)"),
    archived: bool = typer.Option(False, "--archived", help="Create the area archived"),
) -> None:
    """Create a new area."""
    state = get_state(ctx)
    fields: dict[str, Any] = {
        "title": title,
        "status": parse_status(status) if status else None,
        "archived": archived,
    }
    if due:
        fields["due_date"] = parse_due_date(due)

    async def _add() -> int:
        async with open_database(state) as db:
            return await AreaRepository(db).create(Area(**fields))

    with cli_errors():
        area_id = asyncio.run(_add())
    console.print(f"[green]✓[/green] Area created: [cyan]{area_id}[/cyan]")


@area_app.command("list")
def list_areas(
    ctx: typer.Context,
    no_archived: bool = typer.Option(False, "--no-archived", help="Hide archived areas"),
) -> None:
    """List areas with their age and linked notes."""
    state = get_state(ctx)

    async def _list() -> None:
        async with open_database(state) as db:
            rows = await AreaRepository(db).read_all(include_archived=not no_archived)

        if not rows:
            console.print("[yellow]No areas found[/yellow]")
            return

        table = Table(title="Areas")
        table.add_column("ID", style="cyan", no_wrap=True, justify="right")
        table.add_column("Title", style="magenta")
        table.add_column("Status", style="yellow")
        table.add_column("Archived", justify="center")
        table.add_column("Age (days)", justify="right", style="blue")
        table.add_column("Notes", style="green")

        for row in rows:
            table.add_row(
                str(row.id),
                row.title,
                row.status or "-",
                "yes" if row.archived else "",
                f"{row.age_in_days:.2f}",
                row.note_titles,
            )

        console.print(table)

    with cli_errors():
        asyncio.run(_list())


@area_app.command("show")
def show_area(
    ctx: typer.Context,
    area_id: int = typer.Argument(..., help="Area ID"),
) -> None:
    """Show one area with its tasks and notes."""
    state = get_state(ctx)

    async def _show() -> None:
        async with open_database(state) as db:
            area = await AreaRepository(db).read(area_id)

        console.print(f"[bold]Area {area.id}[/bold]")
        console.print(f"Title: [magenta]{area.title}[/magenta]")
        console.print(f"Status: {area.status or '-'}")
        console.print(f"Archived: {'yes' if area.archived else 'no'}")
        console.print(f"Created: {area.created_at}")
        console.print(f"Due: {format_date(area.due_date)}")

        if area.tasks:
            console.print("\n[bold]Tasks:[/bold]")
            task_table = Table()
            task_table.add_column("ID", style="cyan", justify="right")
            task_table.add_column("Title", style="magenta")
            task_table.add_column("Status", style="yellow")
            for task in area.tasks:
                task_table.add_row(str(task.id), task.title, task.status or "-")
            console.print(task_table)

        if area.notes:
            console.print("\n[bold]Notes:[/bold]")
            notes_table = Table()
            notes_table.add_column("ID", style="cyan", justify="right")
            notes_table.add_column("Title", style="magenta")
            notes_table.add_column("Path", style="dim")
            for note in area.notes:
                notes_table.add_row(str(note.id), note.title, note.path)
            console.print(notes_table)

    with cli_errors():
        asyncio.run(_show())


@area_app.command("update")
def update_area(
    ctx: typer.Context,
    field: str = typer.Argument(..., help="Field to change: title|status|archived|due"),
    area_id: int = typer.Argument(..., help="Area ID"),
    value: str = typer.Argument(..., help="New value ('none' clears status or due)"),
) -> None:
    """Set a single field on an area."""
    state = get_state(ctx)
    field = field.lower()
    if field not in UPDATABLE_FIELDS:
        valid_values = ", ".join(UPDATABLE_FIELDS)
        raise typer.BadParameter(f"Invalid field '{field}'. Valid values: {valid_values}")
    parsed = _parse_field_value(field, value)

    async def _update() -> None:
        async with open_database(state) as db:
            await AreaRepository(db).set_field(area_id, UPDATABLE_FIELDS[field], parsed)

    with cli_errors():
        asyncio.run(_update())
    console.print(f"[green]✓[/green] Area [cyan]{area_id}[/cyan] {field} updated")


@area_app.command("add-task")
def add_task_to_area(
    ctx: typer.Context,
    area_id: int = typer.Argument(..., help="Area ID"),
    task_id: int = typer.Argument(..., help="Task ID"),
) -> None:
    """Move an existing task into an area."""
    state = get_state(ctx)

    async def _add_task() -> None:
        async with open_database(state) as db:
            await AreaRepository(db).add_task(area_id, task_id)

    with cli_errors():
        asyncio.run(_add_task())
    console.print(
        f"[green]✓[/green] Task [cyan]{task_id}[/cyan] added to area [cyan]{area_id}[/cyan]"
    )


@area_app.command("delete")
def delete_areas(
    ctx: typer.Context,
    area_ids: list[str] = typer.Argument(..., help="Area IDs (space or comma separated)"),
) -> None:
    """Delete areas and their notes. Their tasks are kept without an area."""
    state = get_state(ctx)
    ids = parse_ids(area_ids)

    async def _delete() -> int:
        async with open_database(state) as db:
            repository = AreaRepository(db)
            if len(ids) == 1:
                await repository.delete(ids[0])
                return 1
            return await repository.delete_multiple(ids)

    with cli_errors():
        deleted = asyncio.run(_delete())
    console.print(f"[green]✓[/green] Deleted {deleted} area(s)")
