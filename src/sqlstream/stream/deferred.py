"""Cold async streams and awaitables.

Neither type does any work when created. A RowStream starts a new execution
each time it is iterated and a Deferred runs its factory again on every
await, so one described query can be run any number of times.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Generator
from typing import Any, Generic, TypeVar

from sqlstream.stream.engine import RowIterator, single

T = TypeVar("T")


class Deferred(Generic[T]):
    """An awaitable that calls ``factory`` anew each time it is awaited."""

    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        """Initialize with a zero-argument coroutine function."""
        self._factory = factory

    def __await__(self) -> Generator[Any, None, T]:
        return self._factory().__await__()

    async def run(self) -> T:
        """Run once and return the result; same as awaiting the Deferred."""
        return await self._factory()


class RowStream(Generic[T]):
    """A cold stream of mapped rows.

    ``async for`` over the stream (or ``open()``) creates a fresh RowIterator,
    which acquires, binds and executes on its first pull. Iterating the
    stream directly wraps that iterator in an async generator, so leaving
    the loop early releases the execution through the event loop's
    async-generator finalizer. A RowIterator taken from ``open()`` must be closed by the
    caller, normally with ``async with``.
    """

    def __init__(self, factory: Callable[[], RowIterator[T]]) -> None:
        """Initialize with a factory producing one RowIterator per run."""
        self._factory = factory

    def open(self) -> RowIterator[T]:
        """Start a new, not yet executed, iteration."""
        return self._factory()

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        async with self.open() as rows:
            async for value in rows:
                yield value

    async def to_list(self) -> list[T]:
        """Run once and collect every value."""
        async with self.open() as rows:
            return [value async for value in rows]

    def single(self) -> Deferred[T]:
        """Deferred that yields the only value, failing on zero or many rows."""
        return Deferred(lambda: single(self.open()))
