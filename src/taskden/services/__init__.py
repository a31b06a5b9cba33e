"""Repositories over the taskden database."""

from taskden.services.area_repository import AreaRepository
from taskden.services.note_repository import NoteRepository, coerce_note_type, parent_for
from taskden.services.task_repository import TaskRepository

__all__ = [
    "AreaRepository",
    "NoteRepository",
    "TaskRepository",
    "coerce_note_type",
    "parent_for",
]
