"""Database driver protocols and backends.

The Postgres classes import asyncpg lazily, so they are importable without
the ``postgres`` extra and only fail when a connection is opened.
"""

from sqlstream.db.backend import Connection, ConnectionProvider, Cursor, Row, Statement
from sqlstream.db.connection import adapt_connection, create_provider, provider_from_url
from sqlstream.db.postgres_backend import (
    PostgresConnection,
    PostgresPoolProvider,
    PostgresProvider,
)
from sqlstream.db.rows import ListCursor, Record
from sqlstream.db.sqlite_backend import SQLiteConnection, SQLiteProvider

__all__ = [
    "Connection",
    "ConnectionProvider",
    "Cursor",
    "ListCursor",
    "PostgresConnection",
    "PostgresPoolProvider",
    "PostgresProvider",
    "Record",
    "Row",
    "SQLiteConnection",
    "SQLiteProvider",
    "Statement",
    "adapt_connection",
    "create_provider",
    "provider_from_url",
]
