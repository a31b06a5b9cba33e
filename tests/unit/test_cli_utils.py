"""Unit tests for CLI utility functions."""

from datetime import datetime, timezone

import pytest
import typer
from pydantic import ValidationError

from taskden.cli.utils import (
    cli_errors,
    format_date,
    format_error,
    is_clear_value,
    parse_bool,
    parse_due_date,
    parse_ids,
    parse_priority,
    parse_status,
)
from taskden.domain.models import Priority, Status, TaskUpdate
from taskden.infrastructure.exceptions import TaskNotFoundError


class TestParsers:
    """Tests for argument parsers."""

    def test_parse_priority(self):
        assert parse_priority("High") is Priority.HIGH

    def test_parse_priority_invalid(self):
        with pytest.raises(typer.BadParameter, match="Valid values: low, medium, high, urgent"):
            parse_priority("asap")

    def test_parse_status(self):
        assert parse_status("DOING") is Status.DOING

    def test_parse_status_invalid(self):
        with pytest.raises(typer.BadParameter, match="Invalid status"):
            parse_status("blocked")

    @pytest.mark.parametrize("value", ["true", "Yes", "1", "on"])
    def test_parse_bool_true(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "NO", "0", "off"])
    def test_parse_bool_false(self, value):
        assert parse_bool(value) is False

    def test_parse_bool_invalid(self):
        with pytest.raises(typer.BadParameter):
            parse_bool("maybe")

    def test_parse_due_date(self):
        assert parse_due_date("2025-06-01") == datetime(2025, 6, 1, tzinfo=timezone.utc)

    def test_parse_due_date_invalid(self):
        with pytest.raises(typer.BadParameter, match="YYYY-MM-DD"):
            parse_due_date("06/01/2025")

    def test_parse_ids_mixed(self):
        assert parse_ids(["1,2", "5", " 7 , "]) == [1, 2, 5, 7]

    def test_parse_ids_keeps_non_positive_for_repository(self):
        assert parse_ids(["0"]) == [0]

    def test_parse_ids_rejects_non_integers(self):
        with pytest.raises(typer.BadParameter, match="IDs must be integers"):
            parse_ids(["1,x"])

    def test_parse_ids_requires_one(self):
        with pytest.raises(typer.BadParameter):
            parse_ids([","])


@pytest.mark.parametrize("value", ["", "none", "NULL", "-", "  None "])
def test_is_clear_value(value):
    assert is_clear_value(value)


def test_is_clear_value_false_for_text():
    assert not is_clear_value("nothing")


def test_format_date():
    assert format_date(datetime(2025, 3, 9, tzinfo=timezone.utc)) == "2025-03-09"
    assert format_date(None) == "-"


def test_format_error_validation_error():
    with pytest.raises(ValidationError) as exc_info:
        TaskUpdate(title="")

    assert format_error(exc_info.value).startswith("title:")


def test_cli_errors_exits_with_status_one():
    with pytest.raises(typer.Exit) as exc_info:
        with cli_errors():
            raise TaskNotFoundError(3)

    assert exc_info.value.exit_code == 1


def test_cli_errors_lets_other_errors_through():
    with pytest.raises(RuntimeError):
        with cli_errors():
            raise RuntimeError("bug")
