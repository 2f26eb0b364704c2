"""Tests for the SQLite driver wrapper."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

import pytest

from sqlstream.db.sqlite_backend import LAST_INSERT_ROWID, SQLiteConnection, SQLiteProvider
from sqlstream.errors import BindingError


class Status(Enum):
    ACTIVE = "active"


@pytest.mark.asyncio
async def test_query_rows_by_name_and_index(conn):
    statement = await SQLiteConnection(conn).prepare("SELECT ID, USERNAME FROM USER WHERE ID = ?")
    statement.bind(0, 1)
    cursor = await statement.execute_query()
    row = await cursor.fetchone()
    assert row["USERNAME"] == "thomasnield"
    assert row[0] == 1
    assert await cursor.fetchone() is None
    await cursor.close()
    await statement.close()


@pytest.mark.asyncio
async def test_values_converted_before_binding(conn):
    await conn.execute("CREATE TABLE T (U TEXT, D TEXT, TS TEXT, M TEXT, S TEXT)")
    u = uuid.UUID("12345678-1234-5678-1234-567812345678")
    statement = await SQLiteConnection(conn).prepare("INSERT INTO T VALUES (?, ?, ?, ?, ?)")
    for i, value in enumerate(
        [u, date(2024, 5, 6), datetime(2024, 5, 6, 7, 8, 9), Decimal("9.99"), Status.ACTIVE]
    ):
        statement.bind(i, value)
    assert await statement.execute_update() == 1
    await statement.close()

    cursor = await conn.execute("SELECT * FROM T")
    assert tuple(await cursor.fetchone()) == (
        "12345678-1234-5678-1234-567812345678",
        "2024-05-06",
        "2024-05-06 07:08:09",
        "9.99",
        "active",
    )


@pytest.mark.asyncio
async def test_unbound_gap_rejected(conn):
    statement = await SQLiteConnection(conn).prepare("SELECT ?, ?")
    statement.bind(1, "b")
    with pytest.raises(BindingError):
        await statement.execute_query()
    await statement.close()


@pytest.mark.asyncio
async def test_generated_key_is_last_rowid(conn):
    statement = await SQLiteConnection(conn).prepare(
        "INSERT INTO USER (USERNAME, PASSWORD) VALUES (?, ?)", return_keys=True
    )
    statement.bind(0, "a")
    statement.bind(1, "b")
    assert await statement.execute_update() == 1
    keys = await statement.generated_keys()
    key = await keys.fetchone()
    assert key[0] == 3
    assert key[LAST_INSERT_ROWID] == 3
    assert await keys.fetchone() is None


@pytest.mark.asyncio
async def test_no_keys_unless_requested(conn):
    statement = await SQLiteConnection(conn).prepare(
        "INSERT INTO USER (USERNAME, PASSWORD) VALUES ('a', 'b')"
    )
    await statement.execute_update()
    assert await (await statement.generated_keys()).fetchone() is None


@pytest.mark.asyncio
async def test_returning_rows_are_keys(conn):
    statement = await SQLiteConnection(conn).prepare(
        "UPDATE USER SET PASSWORD = 'x' RETURNING ID", return_keys=True
    )
    await statement.execute_update()
    keys = await statement.generated_keys()
    assert sorted([(await keys.fetchone())[0], (await keys.fetchone())[0]]) == [1, 2]


@pytest.mark.asyncio
async def test_statement_close_is_idempotent(conn):
    statement = await SQLiteConnection(conn).prepare("SELECT 1")
    await statement.close()
    await statement.close()


@pytest.mark.asyncio
async def test_provider_opens_autocommit_connections(db_file):
    provider = SQLiteProvider(db_file, timeout=1.0)
    first = await provider.acquire()
    statement = await first.prepare("DELETE FROM USER WHERE ID = 1")
    await statement.execute_update()
    await statement.close()
    await first.close()

    second = await provider.acquire()
    statement = await second.prepare("SELECT COUNT(*) FROM USER")
    cursor = await statement.execute_query()
    assert (await cursor.fetchone())[0] == 1
    await statement.close()
    await second.close()


@pytest.mark.asyncio
async def test_provider_creates_parent_directory(tmp_path):
    provider = SQLiteProvider(tmp_path / "nested" / "dir" / "new.db")
    connection = await provider.acquire()
    await connection.close()
    assert (tmp_path / "nested" / "dir" / "new.db").exists()


def test_provider_timeout_from_env(monkeypatch):
    monkeypatch.setenv("SQLSTREAM_SQLITE_TIMEOUT", "2.5")
    assert SQLiteProvider(":memory:").timeout == 2.5
