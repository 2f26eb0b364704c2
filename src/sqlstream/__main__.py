"""Command-line entry point: run one statement and print its results.

Usage:
    sqlstream select "SELECT * FROM user WHERE id = :id" -p id=2
    sqlstream --db sqlite:///app.db insert "INSERT INTO t (a) VALUES (?)" -a 42
    sqlstream execute "DELETE FROM t WHERE a = :a" -p a=42

Rows are printed as one JSON object per line; ``execute`` prints the
affected-row count. Parameter values are parsed as JSON literals when they
parse, and bound as text otherwise.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from sqlstream.api import execute, insert, select
from sqlstream.config import get_log_level
from sqlstream.db.backend import Row
from sqlstream.db.connection import create_provider

logger = logging.getLogger(__name__)


def _parse_value(raw: str) -> Any:
    """Parse a command-line value as a JSON literal, falling back to text."""
    try:
        value = json.loads(raw)
    except ValueError:
        return raw
    if isinstance(value, (dict, list)):
        return raw
    return value


def _parse_named(items: list[str]) -> dict[str, Any]:
    """Split ``NAME=VALUE`` items into a parameter mapping."""
    named: dict[str, Any] = {}
    for item in items:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            raise ValueError(f"Expected NAME=VALUE, got {item!r}")
        named[name] = _parse_value(raw)
    return named


def _row_to_dict(row: Row) -> dict[str, Any]:
    """Convert a row to a JSON-friendly dict keyed by column name."""
    return {key: row[key] for key in row.keys()}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sqlstream", description="Run a SQL statement with named parameters"
    )
    parser.add_argument(
        "--db",
        default=None,
        help="Database URL or SQLite path (default: SQLSTREAM_DATABASE_URL)",
    )
    parser.add_argument(
        "command", choices=("select", "insert", "execute"), help="Kind of statement"
    )
    parser.add_argument("sql", help="SQL template with :name and/or ? placeholders")
    parser.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Named parameter (repeatable)",
    )
    parser.add_argument(
        "-a",
        "--arg",
        action="append",
        default=[],
        metavar="VALUE",
        help="Positional parameter for the next ? (repeatable)",
    )
    return parser


async def run(args: argparse.Namespace) -> int:
    """Run the statement described by ``args``; returns the exit code."""
    provider = create_provider(args.db)
    named = _parse_named(args.param)
    factory = {"select": select, "insert": insert, "execute": execute}[args.command]
    operation = factory(provider, args.sql)
    for raw in args.arg:
        operation.parameter(_parse_value(raw))
    operation.parameters(named)

    if args.command == "execute":
        print(await operation.run())
        return 0

    async for row in operation.produce_many(_row_to_dict):
        print(json.dumps(row, default=str))
    return 0


def main() -> None:
    """Run the sqlstream command-line tool."""
    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    args = build_parser().parse_args()
    try:
        code = asyncio.run(run(args))
    except Exception as exc:
        logger.debug("Statement failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
