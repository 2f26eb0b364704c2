"""Shared test fixtures."""

from typing import Any

import aiosqlite
import pytest_asyncio

from sqlstream.db.rows import Record
from sqlstream.db.sqlite_backend import SQLiteProvider

USER_SCHEMA = (
    "CREATE TABLE USER (ID INTEGER PRIMARY KEY, "
    "USERNAME VARCHAR(30) NOT NULL, PASSWORD VARCHAR(30) NOT NULL)"
)
USER_SEED = (
    "INSERT INTO USER (USERNAME,PASSWORD) VALUES ('thomasnield','password123')",
    "INSERT INTO USER (USERNAME,PASSWORD) VALUES ('bobmarshal','batman43')",
)


async def seed_users(conn: aiosqlite.Connection) -> None:
    await conn.execute(USER_SCHEMA)
    for statement in USER_SEED:
        await conn.execute(statement)
    await conn.commit()


@pytest_asyncio.fixture
async def conn():
    """In-memory SQLite connection seeded with the USER table."""
    connection = await aiosqlite.connect(":memory:")
    await seed_users(connection)
    yield connection
    await connection.close()


@pytest_asyncio.fixture
async def db_file(tmp_path):
    """Path of an on-disk SQLite database seeded with the USER table."""
    path = tmp_path / "users.db"
    async with aiosqlite.connect(path) as connection:
        await seed_users(connection)
    return path


@pytest_asyncio.fixture
async def provider(db_file):
    """Provider opening a new connection to the seeded on-disk database."""
    return SQLiteProvider(db_file)


def rows(*values: int) -> list[Record]:
    """Records with a single ``id`` column."""
    return [Record(("id",), (v,)) for v in values]


class FakeCursor:
    """Cursor over fixed rows that counts fetches and closes."""

    def __init__(self, rows: list[Any], fail_at: int | None = None):
        self.rows = list(rows)
        self.fail_at = fail_at
        self.fetches = 0
        self.close_count = 0

    async def fetchone(self):
        index = self.fetches
        self.fetches += 1
        if self.fail_at is not None and index == self.fail_at:
            raise RuntimeError("fetch failed")
        if index >= len(self.rows):
            return None
        return self.rows[index]

    async def close(self):
        self.close_count += 1


class FakeStatement:
    """Statement that records binds and hands out FakeCursors."""

    def __init__(self, connection: "FakeConnection", sql: str, return_keys: bool):
        self.connection = connection
        self.sql = sql
        self.return_keys = return_keys
        self.binds: list[tuple[int, Any]] = []
        self.cursor: FakeCursor | None = None
        self.updates = 0
        self.close_count = 0

    def bind(self, index, value):
        if self.connection.fail_bind:
            raise RuntimeError("bind failed")
        self.binds.append((index, value))

    async def execute_query(self):
        self.cursor = FakeCursor(self.connection.rows, self.connection.fail_at)
        return self.cursor

    async def execute_update(self):
        self.updates += 1
        return self.connection.update_count

    async def generated_keys(self):
        self.cursor = FakeCursor(self.connection.keys)
        return self.cursor

    async def close(self):
        self.close_count += 1
        if self.connection.fail_close:
            raise RuntimeError("close failed")


class FakeConnection:
    """Connection that records prepared statements and closes."""

    def __init__(
        self,
        rows: list[Any] = (),
        *,
        keys: list[Any] = (),
        fail_at: int | None = None,
        update_count: int = 1,
        fail_prepare: bool = False,
        fail_bind: bool = False,
        fail_close: bool = False,
    ):
        self.rows = list(rows)
        self.keys = list(keys)
        self.fail_at = fail_at
        self.update_count = update_count
        self.fail_prepare = fail_prepare
        self.fail_bind = fail_bind
        self.fail_close = fail_close
        self.statements: list[FakeStatement] = []
        self.close_count = 0

    async def prepare(self, sql, *, return_keys=False):
        if self.fail_prepare:
            raise RuntimeError("prepare failed")
        statement = FakeStatement(self, sql, return_keys)
        self.statements.append(statement)
        return statement

    async def close(self):
        self.close_count += 1


class FakeProvider:
    """Provider handing out a new FakeConnection per acquisition."""

    def __init__(self, **kwargs: Any):
        self.kwargs = kwargs
        self.connections: list[FakeConnection] = []

    async def acquire(self):
        connection = FakeConnection(**self.kwargs)
        self.connections.append(connection)
        return connection
