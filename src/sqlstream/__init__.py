"""Named-parameter SQL run lazily as async row streams."""

from sqlstream.api import execute, insert, select
from sqlstream.errors import (
    BindingError,
    CardinalityError,
    NoRowsError,
    ParameterNotFoundError,
    ParameterTypeError,
    SqlStreamError,
    TooManyRowsError,
)
from sqlstream.operations import InsertOperation, SelectOperation, UpdateOperation
from sqlstream.source import ConnectionSource, Ownership
from sqlstream.stream.deferred import Deferred, RowStream
from sqlstream.stream.engine import RowIterator, StreamState

__all__ = [
    "BindingError",
    "CardinalityError",
    "ConnectionSource",
    "Deferred",
    "InsertOperation",
    "NoRowsError",
    "Ownership",
    "ParameterNotFoundError",
    "ParameterTypeError",
    "RowIterator",
    "RowStream",
    "SelectOperation",
    "SqlStreamError",
    "StreamState",
    "TooManyRowsError",
    "UpdateOperation",
    "execute",
    "insert",
    "select",
]
