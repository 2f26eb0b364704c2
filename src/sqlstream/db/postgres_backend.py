"""PostgreSQL implementation of the driver protocol.

Uses asyncpg for async access. All SQL reaching the backend uses ``?``
placeholders; this backend translates them to ``$N`` at prepare time.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from sqlstream.binding.dispatcher import POSTGRES_CONVERTERS, BoundParameters, TypeDispatcher
from sqlstream.config import get_pg_pool_max_size, get_pg_pool_min_size
from sqlstream.db.rows import ListCursor

if TYPE_CHECKING:
    import asyncpg

    from sqlstream.db.backend import Cursor

logger = logging.getLogger(__name__)

# Pre-compiled regex for placeholder translation
_PLACEHOLDER_RE = re.compile(r"\?")

_DISPATCHER = TypeDispatcher(POSTGRES_CONVERTERS)


def _translate_placeholders(sql: str) -> str:
    """Convert ``?`` placeholders to ``$1, $2, ...`` for asyncpg."""
    counter = 0

    def _replace(_match: re.Match[str]) -> str:
        nonlocal counter
        counter += 1
        return f"${counter}"

    return _PLACEHOLDER_RE.sub(_replace, sql)


def _parse_rowcount(status: str | None) -> int:
    """Parse affected row count from an asyncpg status string.

    Examples: "INSERT 0 1" → 1, "UPDATE 3" → 3, "DELETE 0" → 0.
    """
    if not status:
        return -1
    parts = status.split()
    if len(parts) >= 2:
        try:
            return int(parts[-1])
        except ValueError:
            pass
    return -1


class PostgresStatement:
    """Wraps an asyncpg prepared statement.

    asyncpg server-side cursors only live inside a transaction, which is the
    caller's business, so results are fetched eagerly and handed out through
    a ListCursor.
    """

    def __init__(
        self,
        prepared: asyncpg.prepared_stmt.PreparedStatement,
        sql: str,
        *,
        return_keys: bool = False,
        dispatcher: TypeDispatcher = _DISPATCHER,
    ) -> None:
        """Initialize with an asyncpg prepared statement and its ``?`` SQL."""
        self.sql = sql
        self.return_keys = return_keys
        self.parameters = BoundParameters(dispatcher)
        self._prepared = prepared
        self._keys: list[Any] = []

    def bind(self, index: int, value: Any) -> None:
        """Bind ``value`` to slot ``index``."""
        self.parameters.bind(index, value)

    async def execute_query(self) -> Cursor:
        """Execute as a query and return a cursor over the fetched records."""
        records = await self._prepared.fetch(*self.parameters.as_tuple())
        return ListCursor(records)

    async def execute_update(self) -> int:
        """Execute as an update; keeps ``RETURNING`` rows as generated keys."""
        records = await self._prepared.fetch(*self.parameters.as_tuple())
        if self.return_keys:
            self._keys = list(records)
        return _parse_rowcount(self._prepared.get_statusmsg())

    async def generated_keys(self) -> Cursor:
        """Return a cursor over the rows returned by ``execute_update``."""
        return ListCursor(self._keys)

    async def close(self) -> None:
        """Drop captured keys; asyncpg frees the statement with the connection."""
        self._keys = []


class PostgresConnection:
    """PostgreSQL implementation of the Connection protocol.

    ``close()`` hands the connection back through ``release`` when it was
    checked out of a pool, and closes it otherwise.
    """

    def __init__(
        self,
        conn: asyncpg.Connection,
        *,
        release: Callable[[asyncpg.Connection], Awaitable[Any]] | None = None,
    ) -> None:
        """Initialize with an asyncpg connection and optional pool release hook."""
        self._conn = conn
        self._release = release

    @property
    def raw(self) -> asyncpg.Connection:
        """The wrapped asyncpg connection."""
        return self._conn

    async def prepare(self, sql: str, *, return_keys: bool = False) -> PostgresStatement:
        """Translate placeholders and prepare ``sql`` on the server."""
        prepared = await self._conn.prepare(_translate_placeholders(sql))
        return PostgresStatement(prepared, sql, return_keys=return_keys)

    async def close(self) -> None:
        """Release to the pool or close the connection."""
        if self._release is not None:
            await self._release(self._conn)
        else:
            await self._conn.close()


class PostgresProvider:
    """Opens a new asyncpg connection per acquisition."""

    def __init__(self, dsn: str) -> None:
        """Initialize with a connection URL."""
        self.dsn = dsn

    async def acquire(self) -> PostgresConnection:
        """Connect and return a new connection."""
        import asyncpg as _asyncpg

        conn = await _asyncpg.connect(self.dsn)
        logger.debug("Opened PostgreSQL connection")
        return PostgresConnection(conn)


class PostgresPoolProvider:
    """Checks connections out of an asyncpg pool; closing releases them."""

    def __init__(self, pool: asyncpg.Pool) -> None:
        """Initialize with an asyncpg connection pool."""
        self._pool = pool

    @classmethod
    async def create(cls, url: str) -> PostgresPoolProvider:
        """Create a pool-backed provider from a connection URL."""
        import asyncpg as _asyncpg

        pool = await _asyncpg.create_pool(
            url, min_size=get_pg_pool_min_size(), max_size=get_pg_pool_max_size()
        )
        return cls(pool)

    async def acquire(self) -> PostgresConnection:
        """Check a connection out of the pool."""
        conn = await self._pool.acquire()
        return PostgresConnection(conn, release=self._pool.release)

    async def close(self) -> None:
        """Close the pool."""
        await self._pool.close()
