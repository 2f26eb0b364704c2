"""Database driver protocol: thin abstraction over async DB connections.

The statement pipeline programs against these protocols. Each backend
(SQLite, Postgres, ...) provides a concrete implementation. All SQL reaching
a backend uses ``?`` placeholders; backends with another native style
translate at prepare time.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Row(Protocol):
    """A database row supporting both named and positional access."""

    def __getitem__(self, key: str | int) -> Any:
        """Get a column value by name or position."""
        ...

    def keys(self) -> Any:
        """Return column names."""
        ...


@runtime_checkable
class Cursor(Protocol):
    """Row source produced by executing a query or fetching generated keys."""

    async def fetchone(self) -> Row | None:
        """Advance to the next row and return it, or None if exhausted."""
        ...

    async def close(self) -> None:
        """Release the cursor."""
        ...


@runtime_checkable
class Statement(Protocol):
    """A prepared statement with zero-based positional parameter slots."""

    sql: str

    def bind(self, index: int, value: Any) -> None:
        """Bind ``value`` to slot ``index``."""
        ...

    async def execute_query(self) -> Cursor:
        """Execute as a query and return its row cursor."""
        ...

    async def execute_update(self) -> int:
        """Execute as an update and return the affected-row count."""
        ...

    async def generated_keys(self) -> Cursor:
        """Return the keys generated by the last ``execute_update``."""
        ...

    async def close(self) -> None:
        """Release the statement."""
        ...


@runtime_checkable
class Connection(Protocol):
    """An open database connection."""

    async def prepare(self, sql: str, *, return_keys: bool = False) -> Statement:
        """Prepare ``sql``, optionally requesting generated-key retrieval."""
        ...

    async def close(self) -> None:
        """Close the connection."""
        ...


@runtime_checkable
class ConnectionProvider(Protocol):
    """Hands out a new connection per acquisition; the caller closes it."""

    async def acquire(self) -> Connection:
        """Open (or check out) a connection."""
        ...
