"""Where an execution gets its connection, and whether it must close it."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from sqlstream.db.backend import Connection, ConnectionProvider
from sqlstream.db.connection import adapt_connection, adapt_provider


class Ownership(StrEnum):
    """Who closes the connection an execution runs on."""

    BORROWED = "borrowed"  # the caller; never closed by sqlstream
    OWNED = "owned"  # the execution; closed exactly once when it ends


@dataclass(frozen=True)
class ConnectionSource:
    """A connection acquisition function tagged with its ownership."""

    acquire: Callable[[], Awaitable[Connection]]
    ownership: Ownership

    @classmethod
    def borrowed(cls, connection: Any) -> ConnectionSource:
        """Run every execution on ``connection``; the caller keeps ownership."""
        conn = adapt_connection(connection)

        async def _acquire() -> Connection:
            return conn

        return cls(acquire=_acquire, ownership=Ownership.BORROWED)

    @classmethod
    def provided(cls, provider: ConnectionProvider) -> ConnectionSource:
        """Acquire a fresh connection from ``provider`` for every execution."""
        return cls(acquire=provider.acquire, ownership=Ownership.OWNED)

    @property
    def owns_connection(self) -> bool:
        """True when executions close the connections they acquire."""
        return self.ownership is Ownership.OWNED


def resolve_source(target: Any) -> ConnectionSource:
    """Turn a connection, provider, asyncpg pool, or source into a source."""
    if isinstance(target, ConnectionSource):
        return target
    provider = adapt_provider(target)
    if provider is not None:
        return ConnectionSource.provided(provider)
    return ConnectionSource.borrowed(target)
