"""Wrapping raw driver connections and building providers from URLs."""

import logging
from typing import Any

import aiosqlite

from sqlstream.config import get_database_url
from sqlstream.db.backend import Connection, ConnectionProvider
from sqlstream.db.sqlite_backend import SQLiteConnection, SQLiteProvider

logger = logging.getLogger(__name__)

_SQLITE_PREFIX = "sqlite://"


def _is_asyncpg(obj: Any, name: str) -> bool:
    """True if ``obj`` is an instance of the asyncpg class ``name``.

    Checked by module so asyncpg is only imported when it is installed.
    """
    try:
        import asyncpg
    except ImportError:
        return False
    return isinstance(obj, getattr(asyncpg, name))


def adapt_connection(conn: Any) -> Connection:
    """Wrap a raw aiosqlite or asyncpg connection in the Connection protocol.

    Objects that already implement the protocol are returned unchanged.
    """
    if isinstance(conn, aiosqlite.Connection):
        return SQLiteConnection(conn)
    if _is_asyncpg(conn, "Connection"):
        from sqlstream.db.postgres_backend import PostgresConnection

        return PostgresConnection(conn)
    if isinstance(conn, Connection):
        return conn
    raise TypeError(f"Unsupported connection type: {type(conn).__name__}")


def adapt_provider(provider: Any) -> ConnectionProvider | None:
    """Return a ConnectionProvider for ``provider``, or None if it is not one.

    An asyncpg pool is wrapped so that closing a connection releases it.
    """
    if _is_asyncpg(provider, "Pool"):
        from sqlstream.db.postgres_backend import PostgresPoolProvider

        return PostgresPoolProvider(provider)
    if isinstance(provider, ConnectionProvider):
        return provider
    return None


def provider_from_url(url: str) -> ConnectionProvider:
    """Create a provider for ``url``.

    ``postgresql://`` and ``postgres://`` URLs use asyncpg; ``sqlite:///path``
    and bare paths use SQLite. ``sqlite://`` with no path is an in-memory
    database, which is new and empty on every acquisition.
    """
    if url.startswith(("postgresql://", "postgres://")):
        from sqlstream.db.postgres_backend import PostgresProvider

        return PostgresProvider(url)
    if url.startswith(_SQLITE_PREFIX):
        path = url[len(_SQLITE_PREFIX) :]
        if path.startswith("/"):
            path = path[1:]
        return SQLiteProvider(path or ":memory:")
    return SQLiteProvider(url)


def create_provider(url: str | None = None) -> ConnectionProvider:
    """Create a provider from ``url`` or SQLSTREAM_DATABASE_URL.

    Falls back to an in-memory SQLite database when neither is set.
    """
    url = url or get_database_url()
    if url is None:
        logger.warning("No database URL configured, using in-memory SQLite")
        return SQLiteProvider(":memory:")
    return provider_from_url(url)
