"""Pytest configuration and fixtures."""

import logging
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
import structlog

from taskden.domain.models import Area, Task
from taskden.infrastructure.database import Database
from taskden.services import AreaRepository, NoteRepository, TaskRepository


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep config, data and log files out of the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for name in (
        "TASKDEN_LOG_LEVEL",
        "TASKDEN_EDITOR",
        "TASKDEN_NOTES_PATH",
        "TASKDEN_THEME",
        "TASKDEN_DB",
        "EDITOR",
    ):
        monkeypatch.delenv(name, raising=False)

    root = logging.getLogger()
    level = root.level
    yield
    # Drop handlers installed by setup_logging; their streams belong to this test
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


# Database fixtures
@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Path for a database file that does not exist yet."""
    return tmp_path / "db" / "taskden.db"


@pytest.fixture
async def memory_db() -> AsyncGenerator[Database, None]:
    """Create in-memory database for fast tests."""
    db = Database(":memory:")
    await db.initialize()
    yield db
    # Cleanup: close the shared connection for :memory: databases
    await db.close()


@pytest.fixture
async def file_db(temp_db_path: Path) -> AsyncGenerator[Database, None]:
    """Create file-based database for persistence tests."""
    db = Database(temp_db_path)
    await db.initialize()
    yield db
    await db.close()


# Repository fixtures
@pytest.fixture
def task_repo(memory_db: Database) -> TaskRepository:
    return TaskRepository(memory_db)


@pytest.fixture
def area_repo(memory_db: Database) -> AreaRepository:
    return AreaRepository(memory_db)


@pytest.fixture
def note_repo(memory_db: Database) -> NoteRepository:
    return NoteRepository(memory_db)


# Test data fixtures
@pytest.fixture
async def task_id(task_repo: TaskRepository) -> int:
    """Id of a freshly created task."""
    return await task_repo.create(Task(title="Write report", priority="high", status="todo"))


@pytest.fixture
async def area_id(area_repo: AreaRepository) -> int:
    """Id of a freshly created area."""
    return await area_repo.create(Area(title="Home", status="doing"))
