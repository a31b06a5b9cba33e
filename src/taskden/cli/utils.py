"""Helpers shared by the CLI commands: argument parsing and error reporting.

Parsers raise ``typer.BadParameter`` so typer prints a usage error
(exit code 2). Storage and validation failures raised while a command
runs are reported by ``cli_errors`` as a red ``Error:`` line (exit code 1).
"""

from collections.abc import AsyncIterator, Iterable, Iterator
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from taskden.domain.models import DATE_FORMAT, Priority, Status, parse_date
from taskden.infrastructure.config import Config, ConfigManager
from taskden.infrastructure.database import Database
from taskden.infrastructure.exceptions import TaskdenError

console = Console()

# Values that clear an optional column in ``update`` commands
CLEAR_VALUES = {"", "none", "null", "-"}

TRUE_VALUES = {"true", "yes", "y", "1", "on"}
FALSE_VALUES = {"false", "no", "n", "0", "off"}


@dataclass
class CLIState:
    """Per-invocation state stored on ``typer.Context.obj``."""

    config_manager: ConfigManager
    config: Config
    db_path: Path


def get_state(ctx: typer.Context) -> CLIState:
    state = ctx.find_root().obj
    if not isinstance(state, CLIState):
        raise RuntimeError("CLI state not initialized")
    return state


@asynccontextmanager
async def open_database(state: CLIState) -> AsyncIterator[Database]:
    """Open (and set up if needed) the database for one command."""
    db = Database(state.db_path)
    await db.initialize()
    try:
        yield db
    finally:
        await db.close()


def format_error(error: Exception) -> str:
    """One-line message for an error raised while a command ran."""
    if isinstance(error, ValidationError):
        return "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'value'}: {err['msg']}"
            for err in error.errors()
        )
    return str(error)


@contextmanager
def cli_errors() -> Iterator[None]:
    """Print taskden and validation errors in red and exit with status 1."""
    try:
        yield
    except (TaskdenError, ValueError) as e:
        console.print(f"[red]Error:[/red] {format_error(e)}")
        raise typer.Exit(1) from None


def is_clear_value(value: str) -> bool:
    return value.strip().lower() in CLEAR_VALUES


def parse_priority(value: str) -> Priority:
    """Parse a priority name, case-insensitively.

    Examples:
        >>> parse_priority("High")
        <Priority.HIGH: 'high'>
    """
    try:
        return Priority(value)
    except ValueError:
        valid_values = ", ".join(p.value for p in Priority)
        raise typer.BadParameter(
            f"Invalid priority '{value}'. Valid values: {valid_values}"
        ) from None


def parse_status(value: str) -> Status:
    """Parse a status name, case-insensitively."""
    try:
        return Status(value)
    except ValueError:
        valid_values = ", ".join(s.value for s in Status)
        raise typer.BadParameter(
            f"Invalid status '{value}'. Valid values: {valid_values}"
        ) from None


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise typer.BadParameter(f"Invalid boolean '{value}'. Use true or false")


def parse_due_date(value: str) -> datetime:
    """Parse ``YYYY-MM-DD`` into a UTC midnight datetime."""
    try:
        return parse_date(value)
    except ValueError:
        raise typer.BadParameter(
            f"Invalid date '{value}'. Expected format: YYYY-MM-DD"
        ) from None


def parse_ids(values: Iterable[str]) -> list[int]:
    """Parse ids given as separate arguments and/or comma-separated lists.

    Range checks (id > 0) are left to the repositories.

    Examples:
        >>> parse_ids(["1,2", "5"])
        [1, 2, 5]
    """
    ids: list[int] = []
    for value in values:
        for part in value.split(","):
            part = part.strip()
            if not part:
                continue
            try:
                ids.append(int(part))
            except ValueError:
                raise typer.BadParameter(f"Invalid ID '{part}'. IDs must be integers") from None
    if not ids:
        raise typer.BadParameter("At least one ID is required")
    return ids


def format_date(value: datetime | None) -> str:
    return value.strftime(DATE_FORMAT) if value else "-"
