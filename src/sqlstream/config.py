"""Environment-variable-based configuration."""

import os


def get_database_url() -> str | None:
    """Return the database URL from SQLSTREAM_DATABASE_URL, if set."""
    return os.environ.get("SQLSTREAM_DATABASE_URL") or None


def get_log_level() -> str:
    """Return the logging level from SQLSTREAM_LOG_LEVEL."""
    return os.environ.get("SQLSTREAM_LOG_LEVEL", "WARNING").upper()


def get_sqlite_timeout() -> float:
    """Return the SQLite busy timeout in seconds from SQLSTREAM_SQLITE_TIMEOUT."""
    return float(os.environ.get("SQLSTREAM_SQLITE_TIMEOUT", "5.0"))


def get_pg_pool_min_size() -> int:
    """Return the minimum asyncpg pool size from SQLSTREAM_PG_POOL_MIN_SIZE."""
    return int(os.environ.get("SQLSTREAM_PG_POOL_MIN_SIZE", "2"))


def get_pg_pool_max_size() -> int:
    """Return the maximum asyncpg pool size from SQLSTREAM_PG_POOL_MAX_SIZE."""
    return int(os.environ.get("SQLSTREAM_PG_POOL_MAX_SIZE", "10"))
