"""Exception types raised by sqlstream.

Driver errors (sqlite3, aiosqlite, asyncpg) are not wrapped; they reach the
consumer unchanged through the stream or awaitable that triggered them.
"""

from typing import Any


class SqlStreamError(Exception):
    """Base class for all sqlstream errors."""


class BindingError(SqlStreamError, ValueError):
    """A parameter could not be bound to the statement."""


class ParameterNotFoundError(BindingError):
    """A named parameter does not occur in the SQL template."""

    def __init__(self, name: str) -> None:
        """Initialize with the offending parameter name."""
        super().__init__(f"Parameter {name} not found")
        self.name = name


class ParameterTypeError(BindingError, TypeError):
    """A value's runtime type has no registered bind conversion."""

    def __init__(self, value: Any) -> None:
        """Initialize with the value that could not be classified."""
        super().__init__(f"Cannot bind value of type {type(value).__name__}: {value!r}")
        self.value = value


class CardinalityError(SqlStreamError):
    """A single-row result was requested but the row count was not one."""


class NoRowsError(CardinalityError):
    """The row source was empty."""


class TooManyRowsError(CardinalityError):
    """The row source produced more than one row."""
