"""Tests for environment-variable configuration."""

from sqlstream.config import (
    get_database_url,
    get_log_level,
    get_pg_pool_max_size,
    get_pg_pool_min_size,
    get_sqlite_timeout,
)


def test_defaults(monkeypatch):
    for name in (
        "SQLSTREAM_DATABASE_URL",
        "SQLSTREAM_LOG_LEVEL",
        "SQLSTREAM_SQLITE_TIMEOUT",
        "SQLSTREAM_PG_POOL_MIN_SIZE",
        "SQLSTREAM_PG_POOL_MAX_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)
    assert get_database_url() is None
    assert get_log_level() == "WARNING"
    assert get_sqlite_timeout() == 5.0
    assert get_pg_pool_min_size() == 2
    assert get_pg_pool_max_size() == 10


def test_overrides(monkeypatch):
    monkeypatch.setenv("SQLSTREAM_DATABASE_URL", "sqlite:///x.db")
    monkeypatch.setenv("SQLSTREAM_LOG_LEVEL", "debug")
    monkeypatch.setenv("SQLSTREAM_PG_POOL_MIN_SIZE", "1")
    monkeypatch.setenv("SQLSTREAM_PG_POOL_MAX_SIZE", "4")
    assert get_database_url() == "sqlite:///x.db"
    assert get_log_level() == "DEBUG"
    assert get_pg_pool_min_size() == 1
    assert get_pg_pool_max_size() == 4


def test_empty_url_is_unset(monkeypatch):
    monkeypatch.setenv("SQLSTREAM_DATABASE_URL", "")
    assert get_database_url() is None
