"""In-memory rows and cursors for results materialized by a driver."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlstream.db.backend import Row


class Record:
    """A row built from column names and values; indexable by either."""

    def __init__(self, columns: Sequence[str], values: Sequence[Any]) -> None:
        """Initialize with parallel column-name and value sequences."""
        if len(columns) != len(values):
            raise ValueError("Record needs one value per column")
        self._columns = tuple(columns)
        self._values = tuple(values)

    def __getitem__(self, key: str | int) -> Any:
        """Get a column value by name or position."""
        if isinstance(key, int):
            return self._values[key]
        try:
            return self._values[self._columns.index(key)]
        except ValueError:
            raise KeyError(key) from None

    def keys(self) -> list[str]:
        """Return column names."""
        return list(self._columns)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._columns == other._columns and self._values == other._values

    def __repr__(self) -> str:
        pairs = ", ".join(f"{c}={v!r}" for c, v in zip(self._columns, self._values, strict=True))
        return f"Record({pairs})"


class ListCursor:
    """Wraps a list of rows as a Cursor.

    Used where the driver returns results eagerly (asyncpg) or where the rows
    are synthesized (SQLite generated keys).
    """

    def __init__(self, rows: Iterable[Row]) -> None:
        """Initialize with the rows to hand out."""
        self._rows = list(rows)
        self._index = 0
        self.closed = False

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        if self.closed or self._index >= len(self._rows):
            return None
        row = self._rows[self._index]
        self._index += 1
        return row

    async def close(self) -> None:
        """Drop the remaining rows."""
        self.closed = True
        self._rows = []
