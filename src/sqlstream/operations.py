"""Select, insert and update operations with a fluent binding surface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Self, TypeVar

from sqlstream.binding.builder import StatementBuilder
from sqlstream.models.template import SqlTemplate
from sqlstream.stream.deferred import Deferred, RowStream
from sqlstream.stream.engine import Execution, Mapper, RowIterator

if TYPE_CHECKING:
    from sqlstream.db.backend import Connection, Cursor, Statement
    from sqlstream.source import ConnectionSource

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING: Any = object()


async def _prepare_plain(connection: Connection, sql: str) -> Statement:
    return await connection.prepare(sql)


async def _prepare_returning_keys(connection: Connection, sql: str) -> Statement:
    return await connection.prepare(sql, return_keys=True)


class _Operation:
    """Shared parameter surface. Binding is recorded, never executed here."""

    return_keys = False

    def __init__(self, source: ConnectionSource, sql_template: str) -> None:
        """Parse ``sql_template`` and prepare an empty bind queue."""
        self.source = source
        self.template = SqlTemplate.parse(sql_template)
        self.builder = StatementBuilder(
            source,
            self.template,
            _prepare_returning_keys if self.return_keys else _prepare_plain,
        )

    @property
    def sql(self) -> str:
        """The rewritten SQL sent to the driver."""
        return self.template.sql

    def parameter(self, name_or_value: Any, value: Any = _MISSING) -> Self:
        """Bind a parameter.

        ``parameter(value)`` binds the next nameless slot, starting at 0.
        ``parameter(name, value)`` binds every occurrence of ``:name``.
        """
        if value is _MISSING:
            self.builder.bind_next(name_or_value)
            return self
        if not isinstance(name_or_value, str):
            raise TypeError(
                f"Parameter name must be a string, not {type(name_or_value).__name__}"
            )
        self.builder.bind_named(name_or_value, value)
        return self

    def parameters(self, *values: Any, **named: Any) -> Self:
        """Bind several parameters at once.

        Positional ``values`` bind slots 0..n-1 by position; a single mapping
        argument, or keyword arguments, bind by name.
        """
        if len(values) == 1 and isinstance(values[0], Mapping):
            named = {**values[0], **named}
            values = ()
        if values:
            self.builder.bind_all(values)
        for name, value in named.items():
            self.builder.bind_named(name, value)
        return self


class _RowOperation(_Operation, ABC):
    """An operation whose result is a cursor of rows."""

    @abstractmethod
    async def _open(self, execution: Execution) -> Cursor:
        """Build and execute the statement; return the cursor to stream."""

    def produce_many(self, mapper: Mapper[T]) -> RowStream[T]:
        """Cold stream of ``mapper(row)`` for every row."""
        return RowStream(lambda: RowIterator(self._open, mapper, self.source.ownership))

    def produce_one(self, mapper: Mapper[T]) -> Deferred[T]:
        """Cold awaitable of ``mapper(row)`` for the only row."""
        return self.produce_many(mapper).single()

    to_stream = produce_many
    to_one = produce_one


class SelectOperation(_RowOperation):
    """A query; rows are the query's result set."""

    async def _open(self, execution: Execution) -> Cursor:
        statement = await self.builder.build(execution)
        return await statement.execute_query()


class InsertOperation(_RowOperation):
    """An insert; rows are the keys generated by it."""

    return_keys = True

    async def _open(self, execution: Execution) -> Cursor:
        statement = await self.builder.build(execution)
        count = await statement.execute_update()
        logger.debug("Inserted %d rows", count)
        return await statement.generated_keys()


class UpdateOperation(_Operation):
    """Any statement run for its affected-row count (UPDATE, DELETE, DDL)."""

    def run(self) -> Deferred[int]:
        """Cold awaitable of the affected-row count."""
        return Deferred(self._run)

    to_one = run

    async def _run(self) -> int:
        async with Execution(self.source.ownership) as execution:
            statement = await self.builder.build(execution)
            count = await statement.execute_update()
        logger.debug("Updated %d rows", count)
        return count
