"""Pending parameter binds and statement construction."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlstream.errors import BindingError

if TYPE_CHECKING:
    from sqlstream.db.backend import Connection, Statement
    from sqlstream.models.template import SqlTemplate
    from sqlstream.source import ConnectionSource
    from sqlstream.stream.engine import Execution

logger = logging.getLogger(__name__)

Prepare = Callable[["Connection", str], Awaitable["Statement"]]


@dataclass(frozen=True)
class PendingBind:
    """One value waiting to be bound to a statement slot."""

    index: int
    value: Any


class StatementBuilder:
    """Collects binds up front and replays them onto a fresh statement.

    Registering a bind never touches the driver. ``build()`` runs once per
    execution: it acquires a connection, prepares the rewritten SQL and
    applies the queued binds in registration order. Not safe for concurrent
    binding from several tasks; use one operation per concurrent execution.
    """

    def __init__(
        self,
        source: ConnectionSource,
        template: SqlTemplate,
        prepare: Prepare,
    ) -> None:
        """Initialize with a connection source, parsed template and prepare step."""
        self.source = source
        self.template = template
        self._prepare = prepare
        self._pending: list[PendingBind] = []
        self._next_position = 0

    @property
    def sql(self) -> str:
        """The SQL handed to the driver."""
        return self.template.sql

    @property
    def pending(self) -> tuple[PendingBind, ...]:
        """Queued binds in registration order."""
        return tuple(self._pending)

    def bind_next(self, value: Any) -> None:
        """Queue ``value`` for the next bare ``?`` slot, skipping named ones.

        Raises BindingError immediately once every bare ``?`` has a value.
        """
        positional = self.template.positional
        if self._next_position >= len(positional):
            raise BindingError(f"No ? placeholder left for positional value {value!r}")
        self._pending.append(PendingBind(positional[self._next_position], value))
        self._next_position += 1

    def bind_all(self, values: Iterable[Any]) -> None:
        """Queue each of ``values`` for the slot matching its position.

        Slots are absolute: element i goes to slot i whether that slot is a
        bare ``?`` or a named placeholder.
        """
        self._pending.extend(PendingBind(i, value) for i, value in enumerate(values))

    def bind_named(self, name: str, value: Any) -> None:
        """Queue ``value`` for every slot where ``:name`` occurs.

        Raises ParameterNotFoundError immediately for an unknown name.
        """
        for index in self.template.slots_for(name):
            self._pending.append(PendingBind(index, value))

    async def build(self, execution: Execution) -> Statement:
        """Acquire, prepare and bind, recording each resource on ``execution``."""
        execution.connection = await self.source.acquire()
        execution.statement = await self._prepare(execution.connection, self.sql)
        for bind in self._pending:
            execution.statement.bind(bind.index, bind.value)
        logger.debug("Prepared %r with %d binds", self.sql, len(self._pending))
        return execution.statement
