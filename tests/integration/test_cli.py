"""Integration tests for the taskden CLI.

Each test drives the real typer app against a temporary database file
passed with ``--db``.
"""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from taskden import __version__
from taskden.cli.main import app

runner = CliRunner()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "cli" / "taskden.db"


@pytest.fixture
def cli(db_path: Path):
    """Invoke the CLI with ``--db`` pointing at the test database."""

    def invoke(*args: str, input: str | None = None, env: dict[str, str] | None = None):
        return runner.invoke(
            app,
            ["--db", str(db_path), *args],
            input=input,
            env={"COLUMNS": "200", **(env or {})},
        )

    return invoke


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_missing_config_file(tmp_path):
    result = runner.invoke(app, ["--config", str(tmp_path / "absent.yaml"), "version"])

    assert result.exit_code == 1
    assert "config file not found" in result.output


class TestDbCommands:
    """Tests for `taskden db`."""

    def test_init_creates_database(self, cli, db_path):
        result = cli("db", "init")

        assert result.exit_code == 0, result.output
        assert "Database initialized" in result.output
        assert db_path.exists()

    def test_init_twice(self, cli):
        cli("db", "init")
        result = cli("db", "init")

        assert result.exit_code == 0
        assert "already set up" in result.output

    def test_init_validate(self, cli):
        result = cli("db", "init", "--validate")

        assert result.exit_code == 0, result.output
        assert "bridge_notes" in result.output
        assert "Validation passed" in result.output

    def test_reset_aborted(self, cli):
        cli("task", "add", "Keep me")

        result = cli("db", "reset", input="n\n")

        assert result.exit_code == 0
        assert "Aborted" in result.output
        assert "Keep me" in cli("task", "list").output

    def test_reset_confirmed(self, cli):
        cli("task", "add", "Drop me")

        result = cli("db", "reset", "--yes")

        assert result.exit_code == 0, result.output
        assert "Database reset" in result.output
        assert "No tasks found" in cli("task", "list").output


class TestTaskCommands:
    """Tests for `taskden task`."""

    def test_add_and_list(self, cli):
        result = cli("task", "add", "Write report", "--priority", "High", "--status", "todo")

        assert result.exit_code == 0, result.output
        assert "Task created: 1" in result.output

        listing = cli("task", "list")
        assert listing.exit_code == 0
        assert "Write report" in listing.output
        assert "high" in listing.output

    def test_list_empty(self, cli):
        result = cli("task", "list")

        assert result.exit_code == 0
        assert "No tasks found" in result.output

    def test_list_hides_archived(self, cli):
        cli("task", "add", "Visible")
        cli("task", "add", "Hidden", "--archived")

        output = cli("task", "list", "--no-archived").output

        assert "Visible" in output
        assert "Hidden" not in output

    def test_invalid_priority(self, cli):
        result = cli("task", "add", "Nope", "--priority", "asap")

        assert result.exit_code == 2
        assert "Invalid priority" in result.output

    def test_show(self, cli):
        cli("task", "add", "Fix bike", "--description", "Rear brake", "--due", "2030-05-01")

        result = cli("task", "show", "1")

        assert result.exit_code == 0, result.output
        assert "Fix bike" in result.output
        assert "Rear brake" in result.output
        assert "Due: 2030-05-01" in result.output

    def test_show_missing(self, cli):
        result = cli("task", "show", "99")

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "task 99 not found" in result.output

    def test_update_fields(self, cli):
        cli("task", "add", "Plan trip", "--description", "Summer")

        assert cli("task", "update", "status", "1", "doing").exit_code == 0
        result = cli("task", "update", "description", "1", "none")
        assert result.exit_code == 0, result.output
        assert "Task 1 description updated" in result.output

        shown = cli("task", "show", "1").output
        assert "Status: doing" in shown
        assert "Summer" not in shown

    def test_update_unknown_field(self, cli):
        cli("task", "add", "Plan trip")

        result = cli("task", "update", "colour", "1", "red")

        assert result.exit_code == 2
        assert "Invalid field" in result.output

    def test_update_missing_task(self, cli):
        cli("db", "init")

        result = cli("task", "update", "title", "5", "Renamed")

        assert result.exit_code == 1
        assert "task 5 not found" in result.output

    def test_update_blank_title(self, cli):
        cli("task", "add", "Plan trip")

        result = cli("task", "update", "title", "1", "   ")

        assert result.exit_code == 1
        assert "title cannot be empty" in result.output

    def test_delete_several(self, cli):
        for title in ("Alpha", "Bravo", "Charlie"):
            cli("task", "add", title)

        result = cli("task", "delete", "1,2")

        assert result.exit_code == 0, result.output
        assert "Deleted 2 task(s)" in result.output
        output = cli("task", "list").output
        assert "Alpha" not in output
        assert "Charlie" in output

    def test_delete_is_atomic(self, cli):
        cli("task", "add", "Survivor")

        result = cli("task", "delete", "1", "42")

        assert result.exit_code == 1
        assert "not found" in result.output
        assert "Survivor" in cli("task", "list").output

    def test_delete_zero_id(self, cli):
        cli("task", "add", "Survivor")

        result = cli("task", "delete", "0")

        assert result.exit_code == 1
        assert "invalid task ID: 0" in result.output


class TestAreaCommands:
    """Tests for `taskden area`."""

    def test_area_with_task(self, cli):
        assert "Area created: 1" in cli("area", "add", "Home", "--status", "doing").output
        cli("task", "add", "Paint fence")

        result = cli("area", "add-task", "1", "1")
        assert result.exit_code == 0, result.output
        assert "Task 1 added to area 1" in result.output

        shown = cli("area", "show", "1").output
        assert "Home" in shown
        assert "Paint fence" in shown

    def test_add_task_to_missing_area(self, cli):
        cli("task", "add", "Paint fence")

        result = cli("area", "add-task", "3", "1")

        assert result.exit_code == 1
        assert "area 3 not found" in result.output

    def test_update_and_delete(self, cli):
        cli("area", "add", "Garden")

        assert cli("area", "update", "archived", "1", "yes").exit_code == 0
        assert "Garden" not in cli("area", "list", "--no-archived").output

        result = cli("area", "delete", "1")
        assert result.exit_code == 0, result.output
        assert "Deleted 1 area(s)" in result.output
        assert "No areas found" in cli("area", "list").output


class TestNoteCommands:
    """Tests for `taskden note`."""

    def test_add_and_list(self, cli):
        cli("task", "add", "Test Task")

        result = cli("note", "add", "Note 1", "/path/to/note1", "--task", "1")
        assert result.exit_code == 0, result.output
        assert "Note created: 1" in result.output

        listing = cli("note", "list", "--type", "task").output
        assert "Note 1" in listing
        assert "Test Task (1)" in listing
        assert "No notes found" in cli("note", "list", "-t", "area").output

    def test_add_requires_exactly_one_parent(self, cli):
        cli("task", "add", "T")
        cli("area", "add", "A")

        assert cli("note", "add", "N", "/n").exit_code == 2
        assert cli("note", "add", "N", "/n", "--task", "1", "--area", "1").exit_code == 2

    def test_add_to_missing_parent(self, cli):
        cli("db", "init")

        result = cli("note", "add", "N", "/n", "--area", "8")

        assert result.exit_code == 1
        assert "constraint" in result.output

    def test_invalid_type_filter(self, cli):
        result = cli("note", "list", "--type", "project")

        assert result.exit_code == 2

    def test_open_runs_editor(self, cli):
        cli("task", "add", "T")
        cli("note", "add", "N", "/dev/null", "--task", "1")

        result = cli("note", "open", "1", env={"TASKDEN_EDITOR": "true"})

        assert result.exit_code == 0, result.output

    def test_open_missing_note(self, cli):
        cli("db", "init")

        result = cli("note", "open", "4", env={"TASKDEN_EDITOR": "true"})

        assert result.exit_code == 1
        assert "note 4 not found" in result.output

    def test_delete_task_removes_its_notes(self, cli):
        cli("task", "add", "T")
        cli("note", "add", "N", "/n", "--task", "1")

        cli("task", "delete", "1")

        assert "No notes found" in cli("note", "list").output
