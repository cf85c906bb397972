"""Fetch-mode aware wrapper around an executed DB-API cursor."""
from __future__ import annotations

from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any

from fluentql.dbal.config import FetchMode


class Result:
    """Rows and counters of one executed statement.

    Rows of a SELECT are read from the cursor once, when the result is
    created; ``row()`` then walks them and ``rows()`` returns the remainder.
    The fetch mode controls the shape of each row:

    * ``as_assoc()``: ``dict`` keyed by column name (default),
    * ``as_array()``: ``tuple`` in column order,
    * ``as_object()``: :class:`types.SimpleNamespace`,
    * ``as_class(cls)``: ``cls(**row)``, e.g. a pydantic model.

    Args:
        cursor: An executed DB-API cursor.
        query: The statement text that produced it.
        fetch_mode: Initial fetch mode.
    """

    def __init__(self, cursor: Any, query: str, fetch_mode: FetchMode = "assoc") -> None:
        self._query = query
        self._mode: str = fetch_mode
        self._class: type | None = None
        self._position = 0
        self._rowcount: int = getattr(cursor, "rowcount", -1)
        self.last_insert_id: Any = getattr(cursor, "lastrowid", None)
        if cursor.description is not None:
            self._columns = [column[0] for column in cursor.description]
            self._rows = [self._to_dict(row) for row in cursor.fetchall()]
        else:
            self._columns = []
            self._rows = []
        cursor.close()

    def _to_dict(self, row: Any) -> dict[str, Any]:
        if isinstance(row, Mapping):
            return dict(row)
        return dict(zip(self._columns, row))

    # ------------------------------------------------------------------
    # Fetch modes
    # ------------------------------------------------------------------

    def as_assoc(self) -> Result:
        self._mode, self._class = "assoc", None
        return self

    def as_array(self) -> Result:
        self._mode, self._class = "array", None
        return self

    def as_object(self) -> Result:
        self._mode, self._class = "object", None
        return self

    def as_class(self, cls: type) -> Result:
        self._mode, self._class = "class", cls
        return self

    def _shape(self, row: dict[str, Any]) -> Any:
        if self._mode == "array":
            return tuple(row.values())
        if self._mode == "object":
            return SimpleNamespace(**row)
        if self._mode == "class" and self._class is not None:
            return self._class(**row)
        return dict(row)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def row(self) -> Any:
        """Return the next row, or ``None`` when no rows remain."""
        if self._position >= len(self._rows):
            return None
        row = self._rows[self._position]
        self._position += 1
        return self._shape(row)

    def rows(self) -> list[Any]:
        """Return every remaining row."""
        remaining = self._rows[self._position :]
        self._position = len(self._rows)
        return [self._shape(row) for row in remaining]

    def num_rows(self) -> int:
        """Rows returned by a SELECT, or rows affected by a write."""
        if self._columns:
            return len(self._rows)
        return max(self._rowcount, 0)

    def columns(self) -> list[str]:
        return list(self._columns)

    def query(self) -> str:
        return self._query

    def __iter__(self):
        while True:
            row = self.row()
            if row is None:
                return
            yield row

    def __len__(self) -> int:
        return self.num_rows()
