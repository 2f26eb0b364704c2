"""Parameter type dispatch and pending-bind handling."""

from sqlstream.binding.dispatcher import (
    POSTGRES_CONVERTERS,
    SQLITE_CONVERTERS,
    BoundParameters,
    ParameterKind,
    TypeDispatcher,
    classify,
)

__all__ = [
    "POSTGRES_CONVERTERS",
    "SQLITE_CONVERTERS",
    "BoundParameters",
    "ParameterKind",
    "TypeDispatcher",
    "classify",
]
