"""Helpers shared by the repositories: id guards and error translation."""

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import Any

import aiosqlite

from taskden.infrastructure.database import Database
from taskden.infrastructure.exceptions import (
    ConstraintError,
    DatabaseError,
    EmptyIDListError,
    InvalidIDError,
    TransactionError,
)
from taskden.infrastructure.queries import Queries


def check_id(entity: str, value: Any) -> int:
    """Return ``value`` if it is a positive integer id, else raise InvalidIDError."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidIDError(entity, value)
    return value


def check_ids(entity: str, ids: Iterable[Any]) -> list[int]:
    """Validate a bulk id list and drop duplicates, keeping first-seen order.

    Raises:
        EmptyIDListError: If no ids were given
        InvalidIDError: On the first id that is not a positive integer
    """
    unique: list[int] = []
    for value in ids:
        checked = check_id(entity, value)
        if checked not in unique:
            unique.append(checked)
    if not unique:
        raise EmptyIDListError(entity)
    return unique


@asynccontextmanager
async def write_transaction(db: Database, action: str) -> AsyncIterator[Queries]:
    """Yield a Queries facade inside one transaction, translating sqlite errors.

    Integrity violations become ConstraintError; any other sqlite failure
    becomes TransactionError. Either way the transaction has been rolled back.
    """
    try:
        async with db.transaction() as conn:
            yield Queries(conn)
    except aiosqlite.IntegrityError as e:
        raise ConstraintError(f"{action}: constraint violated", e) from e
    except aiosqlite.Error as e:
        raise TransactionError(f"{action} failed", e) from e


@asynccontextmanager
async def read_session(db: Database, action: str) -> AsyncIterator[Queries]:
    """Yield a Queries facade for read-only statements."""
    try:
        async with db._get_connection() as conn:
            yield Queries(conn)
    except aiosqlite.Error as e:
        raise DatabaseError(f"{action} failed", e) from e
