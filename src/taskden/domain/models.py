"""Core domain models for taskden."""

from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DUE_DAYS = 7
DATE_FORMAT = "%Y-%m-%d"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def default_due_date(now: datetime | None = None) -> datetime:
    """Due date used when a task or area is created without one."""
    return (now or utc_now()) + timedelta(days=DEFAULT_DUE_DAYS)


def parse_date(text: str) -> datetime:
    """Parse ``YYYY-MM-DD`` into a UTC midnight datetime.

    Raises:
        ValueError: If the text is not a valid date
    """
    return datetime.strptime(text.strip(), DATE_FORMAT).replace(tzinfo=timezone.utc)


class _LabelEnum(str, Enum):
    """String enum with case-insensitive lookup ("High" -> HIGH)."""

    @classmethod
    def _missing_(cls, value: object) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None

    def __str__(self) -> str:
        return self.value


class Priority(_LabelEnum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Status(_LabelEnum):
    """Canonical status labels offered by the CLI and TUI.

    Stored statuses are free-form; the repositories accept any label.
    """

    TODO = "todo"
    PLANNING = "planning"
    DOING = "doing"
    DONE = "done"


class NoteType(IntEnum):
    """Parent category of a note, as stored in bridge_notes.parent_cat."""

    TASK = 1
    AREA = 2

    def __str__(self) -> str:
        return "Task Note" if self is NoteType.TASK else "Area Note"


def _status_label(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _priority_value(value: Any) -> Any:
    if isinstance(value, str) and not isinstance(value, Priority):
        return Priority(value)
    return value


def _require_title(value: str | None) -> str:
    if value is None or not value.strip():
        raise ValueError("title cannot be empty")
    return value.strip()


# ===== Note parents =====


class TaskParent(BaseModel):
    """Note parent that is a task (parent_cat = 1)."""

    kind: Literal["task"] = "task"
    id: int = Field(gt=0)

    model_config = ConfigDict(frozen=True)

    @property
    def note_type(self) -> NoteType:
        return NoteType.TASK


class AreaParent(BaseModel):
    """Note parent that is an area (parent_cat = 2)."""

    kind: Literal["area"] = "area"
    id: int = Field(gt=0)

    model_config = ConfigDict(frozen=True)

    @property
    def note_type(self) -> NoteType:
        return NoteType.AREA


NoteParent = Annotated[TaskParent | AreaParent, Field(discriminator="kind")]


# ===== Entities =====


class Note(BaseModel):
    """A note file tracked by path; its parent lives in bridge_notes."""

    id: int | None = None
    title: str
    path: str
    note_type: NoteType | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _require_title(v)


class Task(BaseModel):
    """A task row plus the notes linked to it.

    Attributes:
        id: Integer identity assigned by the database (None before insert)
        due_date: Defaults to created_at + 7 days on insert when unset
        area_id: Optional owning area
        notes: Linked notes, populated by TaskRepository.read()
    """

    id: int | None = None
    title: str
    description: str | None = None
    priority: Priority | None = None
    status: str | None = None
    archived: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    last_mod: datetime = Field(default_factory=utc_now)
    due_date: datetime | None = None
    area_id: int | None = None
    notes: list[Note] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _require_title(v)

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, v: Any) -> Any:
        return _priority_value(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Any:
        return _status_label(v)


class Area(BaseModel):
    """An area (project/category) with its tasks and notes as read."""

    id: int | None = None
    title: str
    status: str | None = None
    archived: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    last_mod: datetime = Field(default_factory=utc_now)
    due_date: datetime | None = None
    tasks: list[Task] = Field(default_factory=list)
    notes: list[Note] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _require_title(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Any:
        return _status_label(v)


class BridgeNote(BaseModel):
    """One row of bridge_notes."""

    note_id: int
    parent_cat: NoteType
    parent_task_id: int | None = None
    parent_area_id: int | None = None

    @property
    def parent(self) -> TaskParent | AreaParent:
        if self.parent_cat is NoteType.TASK:
            assert self.parent_task_id is not None
            return TaskParent(id=self.parent_task_id)
        assert self.parent_area_id is not None
        return AreaParent(id=self.parent_area_id)


# ===== List rows =====


class TaskRow(BaseModel):
    """Task list row with aggregated note titles and age."""

    id: int
    title: str
    priority: Priority | None = None
    status: str | None = None
    archived: bool = False
    age_in_days: float = 0.0
    note_titles: str = ""
    area_id: int | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, v: Any) -> Any:
        return _priority_value(v)


class AreaRow(BaseModel):
    """Area list row; notes are filled by a per-row query."""

    id: int
    title: str
    status: str | None = None
    archived: bool = False
    age_in_days: float = 0.0
    note_titles: str = ""
    notes: list[Note] = Field(default_factory=list)


class NoteRow(BaseModel):
    """Denormalized note row joined to its parent's title."""

    id: int
    title: str
    path: str
    link_title: str
    parent_id: int
    note_type: NoteType


# ===== Partial updates =====


class _FieldMask(BaseModel):
    """Base for partial updates: only explicitly passed fields are applied."""

    model_config = ConfigDict(extra="forbid")

    def changes(self) -> dict[str, Any]:
        """Return ``{field: value}`` for the fields the caller set, in declaration order."""
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name in self.model_fields_set
        }

    def is_empty(self) -> bool:
        return not self.model_fields_set


class TaskUpdate(_FieldMask):
    """Fields to change on a task.

    ``TaskUpdate(description=None)`` clears the description, whereas
    ``TaskUpdate()`` changes nothing.
    """

    title: str | None = None
    description: str | None = None
    priority: Priority | None = None
    status: str | None = None
    archived: bool | None = None
    due_date: datetime | None = None
    area_id: int | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        return _require_title(v)

    @field_validator("archived")
    @classmethod
    def validate_archived(cls, v: bool | None) -> bool:
        if v is None:
            raise ValueError("archived must be true or false")
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, v: Any) -> Any:
        return _priority_value(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Any:
        return _status_label(v)


class AreaUpdate(_FieldMask):
    """Fields to change on an area."""

    title: str | None = None
    status: str | None = None
    archived: bool | None = None
    due_date: datetime | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        return _require_title(v)

    @field_validator("archived")
    @classmethod
    def validate_archived(cls, v: bool | None) -> bool:
        if v is None:
            raise ValueError("archived must be true or false")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Any:
        return _status_label(v)
