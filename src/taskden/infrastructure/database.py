"""SQLite schema management and connection handling."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite
from aiosqlite import Connection

from taskden.infrastructure.exceptions import SchemaError
from taskden.infrastructure.logger import get_logger

logger = get_logger(__name__)

MEMORY_PATH = ":memory:"

TABLES = ("areas", "tasks", "notes", "bridge_notes")

# Order matters: parents before children.
SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS areas (
        id INTEGER PRIMARY KEY,
        title TEXT NOT NULL,
        status TEXT,
        archived BOOLEAN NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        last_mod TEXT NOT NULL,
        due_date TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id INTEGER PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT,
        priority TEXT,
        status TEXT,
        archived BOOLEAN NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        last_mod TEXT NOT NULL,
        due_date TEXT,
        area_id INTEGER,
        FOREIGN KEY (area_id) REFERENCES areas(id)
            ON DELETE SET NULL ON UPDATE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS notes (
        id INTEGER PRIMARY KEY,
        title TEXT NOT NULL,
        path TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS bridge_notes (
        note_id INTEGER NOT NULL UNIQUE,
        parent_cat INTEGER NOT NULL CHECK (parent_cat IN (1, 2)),
        parent_task_id INTEGER,
        parent_area_id INTEGER,
        FOREIGN KEY (note_id) REFERENCES notes(id)
            ON DELETE CASCADE ON UPDATE CASCADE,
        FOREIGN KEY (parent_task_id) REFERENCES tasks(id)
            ON DELETE CASCADE ON UPDATE CASCADE,
        FOREIGN KEY (parent_area_id) REFERENCES areas(id)
            ON DELETE CASCADE ON UPDATE CASCADE,
        CHECK (
            (parent_cat = 1 AND parent_task_id IS NOT NULL AND parent_area_id IS NULL)
            OR (parent_cat = 2 AND parent_area_id IS NOT NULL AND parent_task_id IS NULL)
        )
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_tasks_area_id ON tasks(area_id)",
    "CREATE INDEX IF NOT EXISTS idx_bridge_notes_task ON bridge_notes(parent_task_id)",
    "CREATE INDEX IF NOT EXISTS idx_bridge_notes_area ON bridge_notes(parent_area_id)",
    """
    CREATE TRIGGER IF NOT EXISTS trg_tasks_last_mod
    AFTER UPDATE ON tasks
    FOR EACH ROW WHEN NEW.last_mod = OLD.last_mod
    BEGIN
        UPDATE tasks
        SET last_mod = strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now')
        WHERE id = NEW.id;
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS trg_areas_last_mod
    AFTER UPDATE ON areas
    FOR EACH ROW WHEN NEW.last_mod = OLD.last_mod
    BEGIN
        UPDATE areas
        SET last_mod = strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now')
        WHERE id = NEW.id;
    END
    """,
)

DROP_STATEMENTS: tuple[str, ...] = (
    "DROP TRIGGER IF EXISTS trg_tasks_last_mod",
    "DROP TRIGGER IF EXISTS trg_areas_last_mod",
    "DROP TABLE IF EXISTS bridge_notes",
    "DROP TABLE IF EXISTS notes",
    "DROP TABLE IF EXISTS tasks",
    "DROP TABLE IF EXISTS areas",
)


class Database:
    """SQLite database holding areas, tasks, notes and their bridge rows."""

    def __init__(self, db_path: Path | str) -> None:
        """Initialize database.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self.db_path = Path(db_path)
        self._initialized = False
        self._shared_conn: Connection | None = None  # For :memory: databases

    @property
    def is_memory(self) -> bool:
        return str(self.db_path) == MEMORY_PATH

    async def initialize(self) -> None:
        """Create the database file, apply pragmas and set up the schema once."""
        if self._initialized:
            return

        if not self.is_memory:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            async with self._get_connection() as conn:
                # journal_mode persists in the file; it cannot change inside a transaction
                await conn.execute("PRAGMA journal_mode=WAL")
                await conn.execute("PRAGMA synchronous=NORMAL")

        await self.setup()
        self._initialized = True

    async def close(self) -> None:
        """Close the database connection.

        Only needed for :memory: databases to clean up the shared connection.
        File-based databases close connections automatically.
        """
        if self._shared_conn is not None:
            await self._shared_conn.close()
            self._shared_conn = None
            self._initialized = False

    @asynccontextmanager
    async def _get_connection(self) -> AsyncIterator[Connection]:
        """Get database connection with proper settings.

        For :memory: databases, maintains a shared connection to preserve data
        across multiple operations. For file databases, creates a new connection
        each time.
        """
        if self.is_memory:
            # Reuse same connection for memory databases to maintain data
            if self._shared_conn is None:
                self._shared_conn = await aiosqlite.connect(MEMORY_PATH)
                self._shared_conn.row_factory = aiosqlite.Row
                await self._shared_conn.execute("PRAGMA foreign_keys=ON")
            yield self._shared_conn
        else:
            async with aiosqlite.connect(str(self.db_path)) as conn:
                conn.row_factory = aiosqlite.Row
                # SQLite defaults to foreign_keys=OFF on every new connection
                await conn.execute("PRAGMA foreign_keys=ON")
                await conn.execute("PRAGMA busy_timeout=5000")
                yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Connection]:
        """Run a block inside an explicit transaction.

        Commits when the block exits normally; on any exception the
        transaction is rolled back and the exception re-raised unchanged.
        """
        async with self._get_connection() as conn:
            if not conn.in_transaction:
                await conn.execute("BEGIN")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def is_setup(self) -> bool:
        """Return True if the tasks table exists."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'tasks'"
            )
            row = await cursor.fetchone()
            return row is not None

    async def setup(self) -> None:
        """Create all tables, indexes and triggers in one transaction.

        Idempotent. A failing statement rolls back every statement before it.

        Raises:
            SchemaError: If any DDL statement fails
        """
        try:
            async with self.transaction() as conn:
                for statement in SCHEMA_STATEMENTS:
                    await conn.execute(statement)
        except aiosqlite.Error as e:
            logger.error("schema_setup_failed", db_path=str(self.db_path), error=str(e))
            raise SchemaError("schema setup failed", e) from e

        logger.debug("schema_setup_complete", db_path=str(self.db_path))

    async def reset(self) -> None:
        """Drop all tables and recreate the schema. Every row is lost.

        Dropping and recreating share one transaction, so a failure keeps
        the old schema and its rows.

        Raises:
            SchemaError: If dropping or recreating fails
        """
        try:
            async with self.transaction() as conn:
                for statement in (*DROP_STATEMENTS, *SCHEMA_STATEMENTS):
                    await conn.execute(statement)
        except aiosqlite.Error as e:
            logger.error("schema_reset_failed", db_path=str(self.db_path), error=str(e))
            raise SchemaError("schema reset failed", e) from e

        logger.warning("schema_reset", db_path=str(self.db_path))

    async def validate_foreign_keys(self) -> list[tuple[str, ...]]:
        """Run PRAGMA foreign_key_check and return violations.

        Returns:
            List of foreign key violations (empty if valid)
        """
        async with self._get_connection() as conn:
            cursor = await conn.execute("PRAGMA foreign_key_check")
            violations = await cursor.fetchall()
            return [tuple(row) for row in violations]

    async def count_orphan_bridge_rows(self) -> int:
        """Count bridge rows whose note or parent row no longer exists."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT COUNT(*) FROM bridge_notes b
                LEFT JOIN notes n ON n.id = b.note_id
                LEFT JOIN tasks t ON t.id = b.parent_task_id
                LEFT JOIN areas a ON a.id = b.parent_area_id
                WHERE n.id IS NULL
                   OR (b.parent_cat = 1 AND t.id IS NULL)
                   OR (b.parent_cat = 2 AND a.id IS NULL)
                """
            )
            row = await cursor.fetchone()
            return int(row[0]) if row else 0

    async def table_counts(self) -> dict[str, int]:
        """Row count per table, for `db init --validate` output."""
        counts: dict[str, int] = {}
        async with self._get_connection() as conn:
            for table in TABLES:
                cursor = await conn.execute(f"SELECT COUNT(*) FROM {table}")
                row = await cursor.fetchone()
                counts[table] = int(row[0]) if row else 0
        return counts
