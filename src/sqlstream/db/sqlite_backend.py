"""SQLite implementation of the driver protocol.

Thin wrapper around aiosqlite, which runs the blocking sqlite3 calls on its
own worker thread. No SQL translation is needed since SQLite accepts ``?``
placeholders natively.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiosqlite

from sqlstream.binding.dispatcher import SQLITE_CONVERTERS, BoundParameters, TypeDispatcher
from sqlstream.config import get_sqlite_timeout
from sqlstream.db.rows import ListCursor, Record

if TYPE_CHECKING:
    from sqlstream.db.backend import Cursor, Row

logger = logging.getLogger(__name__)

LAST_INSERT_ROWID = "last_insert_rowid()"

_DISPATCHER = TypeDispatcher(SQLITE_CONVERTERS)


class SQLiteCursor:
    """Wraps aiosqlite.Cursor to satisfy the Cursor protocol."""

    def __init__(self, cursor: aiosqlite.Cursor) -> None:
        """Initialize with an executed aiosqlite cursor."""
        self._cursor = cursor

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        return await self._cursor.fetchone()

    async def close(self) -> None:
        """Close the underlying cursor."""
        await self._cursor.close()


class SQLiteStatement:
    """A SQL string plus an aiosqlite cursor it will execute on.

    Rows come back as ``aiosqlite.Row`` so mappers can read columns by name or
    position. The row factory is set on this statement's cursor only, never on
    the connection, which may belong to the caller.
    """

    def __init__(
        self,
        cursor: aiosqlite.Cursor,
        sql: str,
        *,
        return_keys: bool = False,
        dispatcher: TypeDispatcher = _DISPATCHER,
    ) -> None:
        """Initialize with a fresh cursor and the positional SQL."""
        self.sql = sql
        self.return_keys = return_keys
        self.parameters = BoundParameters(dispatcher)
        self._cursor = cursor
        self._cursor.row_factory = aiosqlite.Row
        self._keys: list[Row] = []
        self._closed = False

    def bind(self, index: int, value: Any) -> None:
        """Bind ``value`` to slot ``index``."""
        self.parameters.bind(index, value)

    async def execute_query(self) -> Cursor:
        """Execute as a query and return a cursor over its rows."""
        await self._cursor.execute(self.sql, self.parameters.as_tuple())
        return SQLiteCursor(self._cursor)

    async def execute_update(self) -> int:
        """Execute as an update and return the affected-row count.

        With ``return_keys`` the generated keys are captured here: the rows of
        a ``RETURNING`` clause if the statement has one, otherwise the rowid
        of the last inserted row.
        """
        await self._cursor.execute(self.sql, self.parameters.as_tuple())
        if self._cursor.description is not None:
            # RETURNING rows must be drained before rowcount is final
            returned = list(await self._cursor.fetchall())
            if self.return_keys:
                self._keys = returned
        elif self.return_keys and self._cursor.rowcount > 0:
            lastrowid = self._cursor.lastrowid
            if lastrowid is not None:
                self._keys = [Record((LAST_INSERT_ROWID,), (lastrowid,))]
        rowcount = self._cursor.rowcount
        return rowcount if rowcount is not None else -1

    async def generated_keys(self) -> Cursor:
        """Return a cursor over the keys captured by ``execute_update``."""
        return ListCursor(self._keys)

    async def close(self) -> None:
        """Close the underlying cursor once."""
        if self._closed:
            return
        self._closed = True
        await self._cursor.close()


class SQLiteConnection:
    """SQLite implementation of the Connection protocol.

    Each prepared statement gets its own aiosqlite cursor, so concurrent
    executions on one connection do not share ``lastrowid`` or row state.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        """Initialize with an aiosqlite connection."""
        self._conn = conn

    @property
    def raw(self) -> aiosqlite.Connection:
        """The wrapped aiosqlite connection."""
        return self._conn

    async def prepare(self, sql: str, *, return_keys: bool = False) -> SQLiteStatement:
        """Open a cursor for ``sql``."""
        cursor = await self._conn.cursor()
        return SQLiteStatement(cursor, sql, return_keys=return_keys)

    async def close(self) -> None:
        """Close the database connection."""
        await self._conn.close()


class SQLiteProvider:
    """Opens a new autocommit SQLite connection per acquisition.

    Autocommit matches what callers get from a connection they did not open
    themselves: an insert is visible to the next acquisition without an
    explicit commit.
    """

    def __init__(self, database: Path | str, *, timeout: float | None = None) -> None:
        """Initialize with a database path (or ``":memory:"``)."""
        self.database = str(database)
        self.timeout = timeout if timeout is not None else get_sqlite_timeout()

    async def acquire(self) -> SQLiteConnection:
        """Open and return a new connection."""
        if self.database != ":memory:" and not self.database.startswith("file:"):
            Path(self.database).parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(
            self.database,
            timeout=self.timeout,
            isolation_level=None,
            uri=self.database.startswith("file:"),
        )
        logger.debug("Opened SQLite connection to %s", self.database)
        return SQLiteConnection(conn)
