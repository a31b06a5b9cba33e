"""Domain models for taskden."""

from taskden.domain.models import (
    Area,
    AreaParent,
    AreaRow,
    AreaUpdate,
    BridgeNote,
    Note,
    NoteParent,
    NoteRow,
    NoteType,
    Priority,
    Status,
    Task,
    TaskParent,
    TaskRow,
    TaskUpdate,
)

__all__ = [
    "Area",
    "AreaParent",
    "AreaRow",
    "AreaUpdate",
    "BridgeNote",
    "Note",
    "NoteParent",
    "NoteRow",
    "NoteType",
    "Priority",
    "Status",
    "Task",
    "TaskParent",
    "TaskRow",
    "TaskUpdate",
]
