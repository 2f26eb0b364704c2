"""Runtime type dispatch for statement parameters.

Every bound value is classified into one of a closed set of
``ParameterKind`` categories, then converted by the driver's converter table
into something the driver accepts natively. Values outside the set are
rejected rather than silently skipped.
"""

from __future__ import annotations

import io
import uuid
from collections.abc import Callable, Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum, StrEnum
from typing import Any

from sqlstream.errors import BindingError, ParameterTypeError


Converter = Callable[[Any], Any]


class ParameterKind(StrEnum):
    """Categories of bindable values."""

    NULL = "null"
    UUID = "uuid"
    BOOLEAN = "boolean"
    ENUM = "enum"
    INTEGER = "integer"
    TEXT = "text"
    FLOAT = "float"
    TIME = "time"
    DATETIME = "datetime"
    DATE = "date"
    DECIMAL = "decimal"
    BYTES = "bytes"
    STREAM = "stream"


# First match wins. bool is an int, IntEnum/StrEnum are int/str and
# datetime is a date, so the narrower type has to come first.
_CLASSIFICATION: tuple[tuple[type | tuple[type, ...], ParameterKind], ...] = (
    (uuid.UUID, ParameterKind.UUID),
    (bool, ParameterKind.BOOLEAN),
    (Enum, ParameterKind.ENUM),
    (int, ParameterKind.INTEGER),
    (str, ParameterKind.TEXT),
    (float, ParameterKind.FLOAT),
    (time, ParameterKind.TIME),
    (datetime, ParameterKind.DATETIME),
    (date, ParameterKind.DATE),
    (Decimal, ParameterKind.DECIMAL),
    ((bytes, bytearray, memoryview), ParameterKind.BYTES),
    ((io.RawIOBase, io.BufferedIOBase), ParameterKind.STREAM),
)


def classify(value: Any) -> ParameterKind:
    """Return the category of ``value`` or raise ParameterTypeError."""
    if value is None:
        return ParameterKind.NULL
    for types, kind in _CLASSIFICATION:
        if isinstance(value, types):
            return kind
    raise ParameterTypeError(value)


def _identity(value: Any) -> Any:
    return value


POSTGRES_CONVERTERS: dict[ParameterKind, Converter] = {
    kind: _identity for kind in ParameterKind
}
POSTGRES_CONVERTERS[ParameterKind.BYTES] = bytes

SQLITE_CONVERTERS: dict[ParameterKind, Converter] = {
    **POSTGRES_CONVERTERS,
    ParameterKind.UUID: str,
    ParameterKind.DECIMAL: str,
    ParameterKind.TIME: lambda value: value.isoformat(),
    ParameterKind.DATE: lambda value: value.isoformat(),
    ParameterKind.DATETIME: lambda value: value.isoformat(sep=" "),
}


class TypeDispatcher:
    """Converts Python values into driver-native bind values.

    ENUM and STREAM are unwrapped before conversion: an enum member binds its
    ``value`` and a binary stream binds the bytes read from it, each
    dispatched again as an ordinary value.
    """

    def __init__(self, converters: Mapping[ParameterKind, Converter] | None = None) -> None:
        """Initialize with a converter table; missing kinds pass through."""
        self._converters = dict(converters or {})

    def convert(self, value: Any) -> Any:
        """Classify ``value`` and return its driver-level representation."""
        kind = classify(value)
        if kind is ParameterKind.ENUM:
            return self.convert(value.value)
        if kind is ParameterKind.STREAM:
            return self.convert(value.read())
        return self._converters.get(kind, _identity)(value)


_UNBOUND = object()


class BoundParameters:
    """Positional parameter slots of one prepared statement."""

    def __init__(self, dispatcher: TypeDispatcher) -> None:
        """Initialize with the dispatcher used to convert each bound value."""
        self._dispatcher = dispatcher
        self._slots: dict[int, Any] = {}

    def bind(self, index: int, value: Any) -> None:
        """Convert ``value`` and store it at zero-based slot ``index``."""
        if index < 0:
            raise BindingError(f"Invalid parameter slot {index}")
        self._slots[index] = self._dispatcher.convert(value)

    def as_tuple(self) -> tuple[Any, ...]:
        """Return slots ``0..max`` in order; a gap below max is an error."""
        if not self._slots:
            return ()
        values = tuple(self._slots.get(i, _UNBOUND) for i in range(max(self._slots) + 1))
        for i, value in enumerate(values):
            if value is _UNBOUND:
                raise BindingError(f"Parameter slot {i} was never bound")
        return values

    def __len__(self) -> int:
        return len(self._slots)
