"""Task management commands."""

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
    parse_priority,
    parse_status,
)
from taskden.domain.models import Task
from taskden.infrastructure.logger import get_logger
from taskden.services import TaskRepository

logger = get_logger(__name__)

task_app = typer.Typer(help="Task management", no_args_is_help=True)

# CLI field name -> repository field name
UPDATABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "priority": "priority",
    "status": "status",
    "archived": "archived",
    "due": "due_date",
    "area": "area_id",
}

CLEARABLE_FIELDS = {"description", "priority", "status", "due", "area"}


def _parse_field_value(field: str, value: str) -> Any:
    """Convert the raw VALUE argument of ``task update`` for one field."""
    if field in CLEARABLE_FIELDS and is_clear_value(value):
        return None
    if field == "priority":
        return parse_priority(value)
    if field == "status":
        return parse_status(value)
    if field == "archived":
        return parse_bool(value)
    if field == "due":
        return parse_due_date(value)
    if field == "area":
        try:
            return int(value)
        except ValueError:
            raise typer.BadParameter(f"Invalid area ID '{value}'") from None
    return value


@task_app.command("add")
def add_task(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Task title"),
    description: str | None = typer.Option(None, "--description", "-d", help="Task description"),
    priority: str | None = typer.Option(None, "--priority", "-p", help="low|medium|high|urgent"),
    status: str | None = typer.Option(None, "--status", "-s", help="todo|planning|doing|done"),
    due: str | None = typer.Option(None, "--due", help="Due date (YYYY-MM-DD, default: in 7 days)"),
    area: int | None = typer.Option(None, "--area", help="Area ID the task belongs to"),
    archived: bool = typer.Option(False, "--archived", help="Create the task archived"),
) -> None:
    """Create a new task.

    Examples:
        taskden task add "Write report"
        taskden task add "Fix bike" --priority high --status todo --due 2025-06-01
        taskden task add "Plan sprint" --area 2
    """
    state = get_state(ctx)
    fields: dict[str, Any] = {
        "title": title,
        "description": description,
        "priority": parse_priority(priority) if priority else None,
        "status": parse_status(status) if status else None,
        "archived": archived,
        "area_id": area,
    }
    if due:
        fields["due_date"] = parse_due_date(due)

    async def _add() -> int:
        async with open_database(state) as db:
            return await TaskRepository(db).create(Task(**fields))

    with cli_errors():
        task_id = asyncio.run(_add())
    console.print(f"[green]✓[/green] Task created: [cyan]{task_id}[/cyan]")


@task_app.command("list")
def list_tasks(
    ctx: typer.Context,
    no_archived: bool = typer.Option(False, "--no-archived", help="Hide archived tasks"),
) -> None:
    """List tasks with their age and linked notes."""
    state = get_state(ctx)

    async def _list() -> None:
        async with open_database(state) as db:
            rows = await TaskRepository(db).read_all(include_archived=not no_archived)

        if not rows:
            console.print("[yellow]No tasks found[/yellow]")
            return

        table = Table(title="Tasks")
        table.add_column("ID", style="cyan", no_wrap=True, justify="right")
        table.add_column("Title", style="magenta")
        table.add_column("Priority", justify="center")
        table.add_column("Status", style="yellow")
        table.add_column("Archived", justify="center")
        table.add_column("Age (days)", justify="right", style="blue")
        table.add_column("Notes", style="green")

        for row in rows:
            table.add_row(
                str(row.id),
                row.title,
                row.priority.value if row.priority else "-",
                row.status or "-",
                "yes" if row.archived else "",
                f"{row.age_in_days:.2f}",
                row.note_titles,
            )

        console.print(table)

    with cli_errors():
        asyncio.run(_list())


@task_app.command("show")
def show_task(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task ID"),
) -> None:
    """Show one task with its notes."""
    state = get_state(ctx)

    async def _show() -> None:
        async with open_database(state) as db:
            task = await TaskRepository(db).read(task_id)

        console.print(f"[bold]Task {task.id}[/bold]")
        console.print(f"Title: [magenta]{task.title}[/magenta]")
        if task.description:
            console.print(f"Description: {task.description}")
        console.print(f"Priority: {task.priority.value if task.priority else '-'}")
        console.print(f"Status: {task.status or '-'}")
        console.print(f"Archived: {'yes' if task.archived else 'no'}")
        console.print(f"Area: {task.area_id if task.area_id is not None else '-'}")
        console.print(f"Created: {task.created_at}")
        console.print(f"Last Modified: {task.last_mod}")
        console.print(f"Due: {format_date(task.due_date)}")

        if task.notes:
            console.print("\n[bold]Notes:[/bold]")
            notes_table = Table()
            notes_table.add_column("ID", style="cyan", justify="right")
            notes_table.add_column("Title", style="magenta")
            notes_table.add_column("Path", style="dim")
            for note in task.notes:
                notes_table.add_row(str(note.id), note.title, note.path)
            console.print(notes_table)

    with cli_errors():
        asyncio.run(_show())


@task_app.command("update")
def update_task(
    ctx: typer.Context,
    field: str = typer.Argument(
        ..., help="Field to change: title|description|priority|status|archived|due|area"
    ),
    task_id: int = typer.Argument(..., help="Task ID"),
    value: str = typer.Argument(..., help="New value ('none' clears optional fields)"),
) -> None:
    """Set a single field on a task.

    Examples:
        taskden task update status 3 doing
        taskden task update due 3 2025-06-01
        taskden task update description 3 none
    """
    state = get_state(ctx)
    field = field.lower()
    if field not in UPDATABLE_FIELDS:
        valid_values = ", ".join(UPDATABLE_FIELDS)
        raise typer.BadParameter(f"Invalid field '{field}'. Valid values: {valid_values}")
    parsed = _parse_field_value(field, value)

    async def _update() -> None:
        async with open_database(state) as db:
            await TaskRepository(db).set_field(task_id, UPDATABLE_FIELDS[field], parsed)

    with cli_errors():
        asyncio.run(_update())
    logger.debug("cli_task_updated", task_id=task_id, field=field)
    console.print(f"[green]✓[/green] Task [cyan]{task_id}[/cyan] {field} updated")


@task_app.command("delete")
def delete_tasks(
    ctx: typer.Context,
    task_ids: list[str] = typer.Argument(..., help="Task IDs (space or comma separated)"),
) -> None:
    """Delete tasks and every note linked to them.

    All listed tasks are deleted, or none is if any ID does not exist.
    """
    state = get_state(ctx)
    ids = parse_ids(task_ids)

    async def _delete() -> int:
        async with open_database(state) as db:
            repository = TaskRepository(db)
            if len(ids) == 1:
                await repository.delete(ids[0])
                return 1
            return await repository.delete_multiple(ids)

    with cli_errors():
        deleted = asyncio.run(_delete())
    console.print(f"[green]✓[/green] Deleted {deleted} task(s)")
