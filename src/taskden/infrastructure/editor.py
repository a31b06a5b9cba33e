"""Launch the user's editor on note files."""

import asyncio
import shlex
from collections.abc import Sequence
from pathlib import Path

from taskden.infrastructure.config import Config, resolve_editor
from taskden.infrastructure.exceptions import EditorError
from taskden.infrastructure.logger import get_logger

logger = get_logger(__name__)


def resolve_note_path(path: str, config: Config) -> Path:
    """Expand ``~`` and anchor relative note paths at the notes directory."""
    resolved = Path(path).expanduser()
    if not resolved.is_absolute():
        resolved = config.notes_dir / resolved
    return resolved


async def open_in_editor(paths: Sequence[str], config: Config) -> None:
    """Run the editor on one or more note paths and wait for it to exit.

    The editor inherits the terminal (stdin/stdout/stderr), so callers
    running inside the TUI must suspend the app first.

    Args:
        paths: Note paths as stored in the database
        config: Loaded configuration (editor, notes_path)

    Raises:
        EditorError: If no path was given, the editor cannot be started,
            or it exits with a non-zero status
    """
    if not paths:
        raise EditorError("no note paths to open")

    command = shlex.split(resolve_editor(config))
    if not command:
        raise EditorError("editor command is empty")
    files = [str(resolve_note_path(p, config)) for p in paths]

    logger.info("editor_launch", editor=command[0], files=files)
    try:
        process = await asyncio.create_subprocess_exec(*command, *files)
    except OSError as e:
        raise EditorError(f"cannot start editor {command[0]!r}", e) from e

    returncode = await process.wait()
    if returncode != 0:
        logger.warning("editor_failed", editor=command[0], returncode=returncode)
        raise EditorError(f"editor {command[0]!r} exited with status {returncode}")
