"""Tests for connection adaptation and provider selection."""

import pytest

from sqlstream.db.connection import (
    adapt_connection,
    adapt_provider,
    create_provider,
    provider_from_url,
)
from sqlstream.db.postgres_backend import PostgresProvider
from sqlstream.db.sqlite_backend import SQLiteConnection, SQLiteProvider
from tests.conftest import FakeConnection, FakeProvider


class TestAdaptConnection:
    """Raw connections are wrapped; protocol objects pass through."""

    @pytest.mark.asyncio
    async def test_aiosqlite_wrapped(self, conn):
        adapted = adapt_connection(conn)
        assert isinstance(adapted, SQLiteConnection)
        assert adapted.raw is conn

    def test_protocol_object_unchanged(self):
        connection = FakeConnection()
        assert adapt_connection(connection) is connection

    def test_unsupported(self):
        with pytest.raises(TypeError, match="Unsupported connection type"):
            adapt_connection(object())


class TestAdaptProvider:
    def test_provider_unchanged(self):
        provider = FakeProvider()
        assert adapt_provider(provider) is provider

    def test_connection_is_not_a_provider(self):
        assert adapt_provider(FakeConnection()) is None


class TestProviderFromUrl:
    """URLs select the backend."""

    @pytest.mark.parametrize(
        "url, database",
        [
            ("sqlite:///data/app.db", "data/app.db"),
            ("sqlite:////abs/app.db", "/abs/app.db"),
            ("sqlite://", ":memory:"),
            ("sqlite:///:memory:", ":memory:"),
            ("plain/path.db", "plain/path.db"),
        ],
    )
    def test_sqlite(self, url, database):
        provider = provider_from_url(url)
        assert isinstance(provider, SQLiteProvider)
        assert provider.database == database

    @pytest.mark.parametrize("url", ["postgresql://u@h/db", "postgres://u@h/db"])
    def test_postgres(self, url):
        provider = provider_from_url(url)
        assert isinstance(provider, PostgresProvider)
        assert provider.dsn == url


class TestCreateProvider:
    def test_explicit_url_wins(self, monkeypatch):
        monkeypatch.setenv("SQLSTREAM_DATABASE_URL", "postgresql://u@h/db")
        assert isinstance(create_provider("sqlite://"), SQLiteProvider)

    def test_url_from_env(self, monkeypatch):
        monkeypatch.setenv("SQLSTREAM_DATABASE_URL", "postgresql://u@h/db")
        assert isinstance(create_provider(), PostgresProvider)

    def test_default_in_memory(self, monkeypatch):
        monkeypatch.delenv("SQLSTREAM_DATABASE_URL", raising=False)
        provider = create_provider()
        assert isinstance(provider, SQLiteProvider)
        assert provider.database == ":memory:"
