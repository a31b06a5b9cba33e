"""Custom exception hierarchy for taskden storage and validation errors.

Exception Hierarchy:
    TaskdenError (base)
    ├── ConfigError
    ├── DatabaseError (connection and setup failures)
    │   ├── SchemaError
    │   └── TransactionError
    ├── ConstraintError (integrity violations)
    ├── EditorError
    ├── InvalidIDError
    ├── EmptyIDListError
    ├── NoFieldsToUpdateError
    ├── InvalidNoteTypeError
    └── NotFoundError
        ├── TaskNotFoundError
        ├── AreaNotFoundError
        └── NoteNotFoundError
"""

from collections.abc import Iterable
from typing import Any


class TaskdenError(Exception):
    """Base exception for all taskden errors."""

    pass


class ConfigError(TaskdenError):
    """Configuration file could not be read or failed validation."""

    pass


class DatabaseError(TaskdenError):
    """Base class for connection, schema, and transaction failures.

    Attributes:
        message: Error message describing what went wrong
        original_exception: The underlying sqlite error, if any
    """

    def __init__(self, message: str, original_exception: Exception | None = None):
        """Initialize database error.

        Args:
            message: Error message
            original_exception: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception

    def __str__(self) -> str:
        """Return message with the underlying error appended when known."""
        if self.original_exception is not None:
            return f"{self.message}: {self.original_exception}"
        return self.message


class SchemaError(DatabaseError):
    """Schema creation, validation or reset failed and was rolled back."""

    pass


class TransactionError(DatabaseError):
    """A multi-statement transaction failed and was rolled back."""

    pass


class ConstraintError(TaskdenError):
    """An insert or update violated a table constraint.

    Raised for NOT NULL, CHECK, UNIQUE and foreign key violations, e.g. when a
    note is linked to a task that does not exist.
    """

    def __init__(self, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.original_exception = original_exception


class EditorError(TaskdenError):
    """The external editor could not be started or exited with an error."""

    def __init__(self, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.original_exception = original_exception


class InvalidIDError(TaskdenError):
    """An entity id was zero, negative, or otherwise unusable."""

    def __init__(self, entity: str, entity_id: Any):
        """Initialize invalid id error.

        Args:
            entity: Entity kind ("task", "area", "note")
            entity_id: The rejected id value
        """
        super().__init__(f"invalid {entity} ID: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class EmptyIDListError(TaskdenError):
    """A bulk operation was called with no ids."""

    def __init__(self, entity: str):
        super().__init__(f"no {entity} IDs provided")
        self.entity = entity


class NoFieldsToUpdateError(TaskdenError):
    """A partial update named no fields, so nothing was written."""

    def __init__(self, entity: str, entity_id: int):
        super().__init__("no fields to update")
        self.entity = entity
        self.entity_id = entity_id


class InvalidNoteTypeError(TaskdenError):
    """A parent category other than task (1) or area (2) was requested."""

    def __init__(self, value: Any):
        super().__init__(f"invalid note type: {value!r}")
        self.value = value


class NotFoundError(TaskdenError):
    """No row matched the requested id(s).

    Attributes:
        entity: Entity kind ("task", "area", "note")
        ids: The id or ids that were looked up
    """

    entity = "entity"

    def __init__(self, ids: int | Iterable[int]):
        self.ids: list[int] = [ids] if isinstance(ids, int) else list(ids)
        if len(self.ids) == 1:
            message = f"{self.entity} {self.ids[0]} not found"
        else:
            joined = ", ".join(str(i) for i in self.ids)
            message = f"one or more {self.entity}s not found: {joined}"
        super().__init__(message)

    @property
    def entity_id(self) -> int:
        """First id that was looked up."""
        return self.ids[0]


class TaskNotFoundError(NotFoundError):
    entity = "task"


class AreaNotFoundError(NotFoundError):
    entity = "area"


class NoteNotFoundError(NotFoundError):
    entity = "note"
