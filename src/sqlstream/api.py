"""Entry points: describe a statement against a connection or provider.

``target`` may be an open connection (aiosqlite, asyncpg, or anything
implementing the Connection protocol), which the caller keeps owning; a
ConnectionProvider or asyncpg pool, from which every execution acquires and
then closes its own connection; or an explicit ConnectionSource.
"""

from typing import Any

from sqlstream.operations import InsertOperation, SelectOperation, UpdateOperation
from sqlstream.source import resolve_source


def select(target: Any, sql_template: str) -> SelectOperation:
    """Describe a query."""
    return SelectOperation(resolve_source(target), sql_template)


def insert(target: Any, sql_template: str) -> InsertOperation:
    """Describe an insert whose generated keys become the result rows."""
    return InsertOperation(resolve_source(target), sql_template)


def execute(target: Any, sql_template: str) -> UpdateOperation:
    """Describe a statement run for its affected-row count."""
    return UpdateOperation(resolve_source(target), sql_template)
