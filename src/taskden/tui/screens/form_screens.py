"""Modal forms for creating tasks, areas and notes.

Each form dismisses with a dict of validated values, or None when cancelled.
"""

from datetime import datetime
from typing import Any

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Select, Static

from taskden.domain.models import Priority, Status, parse_date


def parse_due(text: str) -> datetime | None:
    """Parse an optional YYYY-MM-DD field; blank means unset."""
    if not text.strip():
        return None
    return parse_date(text)


class FormScreen(ModalScreen[dict[str, Any] | None]):
    """Shared layout, buttons and keybindings for the entity forms."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=True),
        Binding("ctrl+s", "save", "Save", show=True),
    ]

    CSS = """
    FormScreen {
        align: center middle;
    }

    .form-modal {
        width: 70;
        height: auto;
        padding: 1 2;
        border: thick $primary;
        background: $surface;
    }

    .form-title {
        text-align: center;
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }

    .form-field {
        height: auto;
        margin-bottom: 1;
    }

    .form-error {
        color: $error;
        height: auto;
    }

    .button-row {
        height: auto;
        align: center middle;
        margin-top: 1;
    }

    .button-row Button {
        margin: 0 1;
    }
    """

    form_title = "New"

    def compose(self) -> ComposeResult:
        with Container(classes="form-modal"):
            yield Static(self.form_title, classes="form-title")
            with Vertical(classes="form-field"):
                yield from self.compose_fields()
            yield Static("", id="form-error", classes="form-error")
            with Horizontal(classes="button-row"):
                yield Button("Save", variant="primary", id="save-btn")
                yield Button("Cancel", variant="default", id="cancel-btn")

    def compose_fields(self) -> ComposeResult:
        yield from ()

    def on_mount(self) -> None:
        self.query_one("#title-input", Input).focus()

    def collect(self) -> dict[str, Any]:
        """Read and validate the fields; raise ValueError with a user message."""
        title = self.query_one("#title-input", Input).value.strip()
        if not title:
            raise ValueError("Title is required")
        return {"title": title}

    def show_error(self, message: str) -> None:
        self.query_one("#form-error", Static).update(message)

    def action_save(self) -> None:
        try:
            values = self.collect()
        except ValueError as e:
            self.show_error(str(e))
            return
        self.dismiss(values)

    def action_cancel(self) -> None:
        self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.action_save()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save-btn":
            self.action_save()
        elif event.button.id == "cancel-btn":
            self.action_cancel()


def _select_value(select: Select[Any], kind: type) -> Any:
    value = select.value
    return value if isinstance(value, kind) else None


class TaskFormScreen(FormScreen):
    """Form for a new task: title, priority, status and due date."""

    form_title = "New Task"

    def compose_fields(self) -> ComposeResult:
        yield Input(placeholder="Title", id="title-input")
        yield Input(placeholder="Description (optional)", id="description-input")
        yield Select(
            [(p.value.title(), p) for p in Priority],
            prompt="Priority",
            id="priority-select",
        )
        yield Select(
            [(s.value.title(), s) for s in Status],
            prompt="Status",
            id="status-select",
        )
        yield Input(placeholder="Due date YYYY-MM-DD (default: in 7 days)", id="due-input")

    def collect(self) -> dict[str, Any]:
        values = super().collect()
        try:
            due_date = parse_due(self.query_one("#due-input", Input).value)
        except ValueError:
            raise ValueError("Due date must be YYYY-MM-DD") from None
        description = self.query_one("#description-input", Input).value.strip()
        values.update(
            description=description or None,
            priority=_select_value(self.query_one("#priority-select", Select), Priority),
            status=_select_value(self.query_one("#status-select", Select), Status),
            due_date=due_date,
        )
        return values


class AreaFormScreen(FormScreen):
    """Form for a new area: title, status and due date."""

    form_title = "New Area"

    def compose_fields(self) -> ComposeResult:
        yield Input(placeholder="Title", id="title-input")
        yield Select(
            [(s.value.title(), s) for s in Status],
            prompt="Status",
            id="status-select",
        )
        yield Input(placeholder="Due date YYYY-MM-DD (default: in 7 days)", id="due-input")

    def collect(self) -> dict[str, Any]:
        values = super().collect()
        try:
            due_date = parse_due(self.query_one("#due-input", Input).value)
        except ValueError:
            raise ValueError("Due date must be YYYY-MM-DD") from None
        values.update(
            status=_select_value(self.query_one("#status-select", Select), Status),
            due_date=due_date,
        )
        return values


class NoteFormScreen(FormScreen):
    """Form for a new note linked to the selected task or area."""

    def __init__(self, parent_label: str) -> None:
        """Initialize the note form.

        Args:
            parent_label: Shown in the title, e.g. "Task 3: Write report"
        """
        super().__init__()
        self.form_title = f"New Note for {parent_label}"

    def compose_fields(self) -> ComposeResult:
        yield Input(placeholder="Title", id="title-input")
        yield Input(placeholder="Path to note file", id="path-input")

    def collect(self) -> dict[str, Any]:
        values = super().collect()
        path = self.query_one("#path-input", Input).value.strip()
        if not path:
            raise ValueError("Path is required")
        values["path"] = path
        return values
