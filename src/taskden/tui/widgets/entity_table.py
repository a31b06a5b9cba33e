"""DataTable that remembers the database id behind each row."""

from collections.abc import Sequence
from typing import Any

from textual.widgets import DataTable


class EntityTable(DataTable[Any]):
    """Row-cursor table keyed by entity id.

    ``load`` replaces every row and keeps the cursor on the same row index
    when possible, so refreshing after an edit does not jump to the top.
    """

    def __init__(self, columns: Sequence[str], **kwargs: Any) -> None:
        super().__init__(cursor_type="row", zebra_stripes=True, **kwargs)
        self._columns = tuple(columns)
        self._row_ids: list[int] = []

    def on_mount(self) -> None:
        self._ensure_columns()

    def _ensure_columns(self) -> None:
        if not self.columns:
            self.add_columns(*self._columns)

    def load(self, rows: Sequence[tuple[int, Sequence[Any]]]) -> None:
        """Replace the table contents with ``(id, cells)`` pairs."""
        self._ensure_columns()
        cursor = self.cursor_row
        self.clear()
        self._row_ids = []
        for entity_id, cells in rows:
            self.add_row(*cells, key=str(entity_id))
            self._row_ids.append(entity_id)
        if self._row_ids:
            self.move_cursor(row=min(max(cursor, 0), len(self._row_ids) - 1))

    @property
    def row_ids(self) -> list[int]:
        return list(self._row_ids)

    @property
    def selected_id(self) -> int | None:
        """Id of the row under the cursor, or None for an empty table."""
        if not self._row_ids:
            return None
        row = self.cursor_row
        if row < 0 or row >= len(self._row_ids):
            return None
        return self._row_ids[row]
