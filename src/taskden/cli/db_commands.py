"""Database management commands."""

import asyncio
import time

import typer
from rich.table import Table

from taskden.cli.utils import cli_errors, console, get_state
from taskden.infrastructure.database import Database

db_app = typer.Typer(help="Database management", no_args_is_help=True)


@db_app.command("init")
def init(
    ctx: typer.Context,
    validate: bool = typer.Option(False, help="Check foreign keys and bridge rows afterwards"),
) -> None:
    """Create the database and its tables if they do not exist yet.

    Safe to run repeatedly; existing data is kept.

    Examples:
        taskden db init
        taskden db init --validate
        taskden --db /tmp/test.db db init
    """
    state = get_state(ctx)

    async def _init() -> bool:
        database = Database(state.db_path)
        try:
            already_setup = not database.is_memory and state.db_path.exists() and (
                await database.is_setup()
            )

            start_time = time.perf_counter()
            await database.initialize()
            init_duration = time.perf_counter() - start_time

            if already_setup:
                console.print(f"[dim]Database already set up: {state.db_path}[/dim]")
            else:
                console.print(
                    f"[green]✓[/green] Database initialized at {state.db_path} "
                    f"({init_duration:.2f}s)"
                )

            if not validate:
                return True

            console.print("\n[blue]Running database validation...[/blue]")
            violations = await database.validate_foreign_keys()
            orphans = await database.count_orphan_bridge_rows()
            counts = await database.table_counts()
        finally:
            await database.close()

        table = Table(title="Tables")
        table.add_column("Table", style="cyan")
        table.add_column("Rows", style="yellow", justify="right")
        for name, count in counts.items():
            table.add_row(name, str(count))
        console.print(table)

        if violations:
            console.print(f"[red]✗[/red] {len(violations)} foreign key violation(s)")
        if orphans:
            console.print(f"[red]✗[/red] {orphans} orphaned bridge row(s)")
        if violations or orphans:
            return False

        console.print("[green]✓[/green] Validation passed - database ready for use")
        return True

    with cli_errors():
        ok = asyncio.run(_init())
    if not ok:
        raise typer.Exit(1)


@db_app.command("reset")
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Drop every table and recreate an empty schema."""
    state = get_state(ctx)

    if not yes:
        console.print(f"[yellow]This deletes all tasks, areas and notes in {state.db_path}[/yellow]")
        if not typer.confirm("Are you sure you want to continue?"):
            console.print("[dim]Aborted[/dim]")
            raise typer.Exit(0)

    async def _reset() -> None:
        database = Database(state.db_path)
        try:
            await database.initialize()
            await database.reset()
        finally:
            await database.close()

    with cli_errors():
        asyncio.run(_reset())
    console.print("[green]✓[/green] Database reset")
