"""Pull-driven bridge from a driver cursor to an async row stream.

A RowIterator owns one execution: the connection it acquired (or borrowed),
the prepared statement and the cursor. Nothing is opened until the first
``__anext__``; each further call advances the cursor exactly once. Whichever
way the stream ends (exhausted, failed, cancelled) the same one-shot release
closes the cursor, the statement and, if the execution owns it, the
connection.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from types import TracebackType
from typing import TYPE_CHECKING, Generic, TypeVar

from sqlstream.errors import NoRowsError, TooManyRowsError
from sqlstream.source import Ownership

if TYPE_CHECKING:
    from sqlstream.db.backend import Connection, Cursor, Row, Statement

logger = logging.getLogger(__name__)

T = TypeVar("T")

Opener = Callable[["Execution"], Awaitable["Cursor"]]
Mapper = Callable[["Row"], T]


class StreamState(StrEnum):
    """Lifecycle of a RowIterator."""

    UNSTARTED = "unstarted"
    FETCHING = "fetching"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


_ACTIVE = frozenset({StreamState.UNSTARTED, StreamState.FETCHING})


class Execution:
    """Resources held by one run of a statement."""

    def __init__(self, ownership: Ownership) -> None:
        """Initialize empty; the builder and opener fill in resources."""
        self.ownership = ownership
        self.connection: Connection | None = None
        self.statement: Statement | None = None
        self.cursor: Cursor | None = None
        self.released = False

    async def release(self, *, raise_errors: bool = False) -> None:
        """Close cursor, statement and owned connection, at most once.

        Every close is attempted even if an earlier one fails. Failures are
        logged; with ``raise_errors`` the first one is re-raised afterwards.
        Pass ``raise_errors=False`` while another error is propagating so a
        close failure cannot replace it.
        """
        if self.released:
            return
        self.released = True

        resources: list[tuple[str, Cursor | Statement | Connection | None]] = [
            ("cursor", self.cursor),
            ("statement", self.statement),
        ]
        if self.ownership is Ownership.OWNED:
            resources.append(("connection", self.connection))

        first_error: Exception | None = None
        for kind, resource in resources:
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as exc:
                logger.warning("Failed to close %s: %s", kind, exc)
                if first_error is None:
                    first_error = exc
        logger.debug("Released execution resources (%s connection)", self.ownership)
        if raise_errors and first_error is not None:
            raise first_error

    async def __aenter__(self) -> Execution:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.release(raise_errors=exc_type is None)


class RowIterator(Generic[T]):
    """Async iterator over mapped rows of a single execution.

    ``cancel()`` is cooperative: it is observed at the next pull, which then
    releases resources and ends the iteration without an error. ``aclose()``
    (or leaving ``async with``) cancels and releases immediately. An in-flight
    driver call is never interrupted by either; task cancellation while one
    is awaited releases resources and lets CancelledError propagate.
    """

    def __init__(self, opener: Opener, mapper: Mapper[T], ownership: Ownership) -> None:
        """Initialize with the open step, the row mapper and connection ownership."""
        self._opener = opener
        self._mapper = mapper
        self._execution = Execution(ownership)
        self._state = StreamState.UNSTARTED
        self._cancelled = False

    @property
    def state(self) -> StreamState:
        """Current lifecycle state."""
        return self._state

    @property
    def execution(self) -> Execution:
        """Resources held by this iterator."""
        return self._execution

    def cancel(self) -> None:
        """Request that the stream stop at the next pull."""
        self._cancelled = True

    async def aclose(self) -> None:
        """Cancel and release resources now."""
        self._cancelled = True
        if self._state in _ACTIVE:
            await self._finish(StreamState.CANCELLED)

    def __aiter__(self) -> RowIterator[T]:
        return self

    async def __anext__(self) -> T:
        row = await self._pull()
        if row is None:
            raise StopAsyncIteration
        try:
            return self._mapper(row)
        except Exception:
            await self._finish(StreamState.FAILED)
            raise

    async def advance(self) -> bool:
        """Move past the next row without mapping it; False once the stream ended."""
        return await self._pull() is not None

    async def __aenter__(self) -> RowIterator[T]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _pull(self) -> Row | None:
        """Advance the cursor once; None once the stream has ended."""
        if self._cancelled and self._state in _ACTIVE:
            await self._finish(StreamState.CANCELLED)
        if self._state not in _ACTIVE:
            return None

        try:
            if self._state is StreamState.UNSTARTED:
                self._execution.cursor = await self._opener(self._execution)
                self._state = StreamState.FETCHING
            row = await self._execution.cursor.fetchone()
        except asyncio.CancelledError:
            await self._finish(StreamState.CANCELLED)
            raise
        except Exception:
            await self._finish(StreamState.FAILED)
            raise

        if row is None:
            await self._finish(StreamState.DONE, raise_errors=True)
        return row

    async def _finish(self, state: StreamState, *, raise_errors: bool = False) -> None:
        self._state = state
        await self._execution.release(raise_errors=raise_errors)


async def single(rows: RowIterator[T]) -> T:
    """Return the only value of ``rows``.

    Raises NoRowsError for an empty stream and TooManyRowsError when a second
    row exists. The second row is detected without being mapped.
    """
    async with rows:
        try:
            value = await anext(rows)
        except StopAsyncIteration:
            raise NoRowsError("Expected exactly one row, got none") from None
        if await rows.advance():
            raise TooManyRowsError("Expected exactly one row, got more than one")
        return value
