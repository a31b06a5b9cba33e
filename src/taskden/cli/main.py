"""taskden CLI - tasks, areas and notes from the terminal."""

from pathlib import Path

import typer

from taskden import __version__
from taskden.cli.area_commands import area_app
from taskden.cli.db_commands import db_app
from taskden.cli.note_commands import note_app
from taskden.cli.task_commands import task_app
from taskden.cli.utils import CLIState, console, get_state
from taskden.infrastructure.config import ConfigManager
from taskden.infrastructure.exceptions import ConfigError
from taskden.infrastructure.logger import get_logger, setup_logging

logger = get_logger(__name__)

app = typer.Typer(
    name="taskden",
    help="Personal task, area and note manager. Run without a command to open the TUI.",
    invoke_without_command=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", help="Config file (YAML)"),
    db: Path | None = typer.Option(None, "--db", help="Database file (overrides config)"),
) -> None:
    """Load configuration, set up logging and open the TUI if no command is given."""
    config_manager = ConfigManager(config_file=config)
    try:
        loaded = config_manager.load_config()
        db_path = db or config_manager.get_database_path()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    # The TUI owns the terminal, so only the log file receives records there
    setup_logging(
        log_level=loaded.log_level,
        log_dir=config_manager.get_log_dir(),
        console=ctx.invoked_subcommand not in (None, "tui"),
    )
    logger.debug("cli_start", db_path=str(db_path), command=ctx.invoked_subcommand)

    ctx.obj = CLIState(config_manager=config_manager, config=loaded, db_path=db_path)

    if ctx.invoked_subcommand is None:
        _run_tui(ctx.obj)


# ===== Version =====
@app.command()
def version() -> None:
    """Show taskden version."""
    console.print(f"[bold]taskden[/bold] version [cyan]{__version__}[/cyan]")


# ===== TUI =====
def _run_tui(state: CLIState) -> None:
    from taskden.tui.app import TaskdenApp
    from taskden.tui.services.data_service import TaskdenDataService

    data_service = TaskdenDataService.from_path(state.db_path)
    TaskdenApp(data_service=data_service, config=state.config).run()


@app.command()
def tui(ctx: typer.Context) -> None:
    """Open the interactive terminal UI."""
    _run_tui(get_state(ctx))


app.add_typer(task_app, name="task")
app.add_typer(area_app, name="area")
app.add_typer(note_app, name="note")
app.add_typer(db_app, name="db")


if __name__ == "__main__":
    app()
