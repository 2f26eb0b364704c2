"""Parsed SQL templates with named placeholders."""

import re

from pydantic import BaseModel, ConfigDict

from sqlstream.errors import ParameterNotFoundError

# A named placeholder (``:name``) or a bare positional one (``?``)
_PLACEHOLDER_RE = re.compile(r":([A-Za-z0-9_]+)|\?")


class SqlTemplate(BaseModel):
    """A SQL template rewritten to positional ``?`` placeholders.

    ``positions`` maps each named placeholder to the zero-based driver slots
    where it occurs and ``positional`` lists the slots of bare ``?`` tokens.
    Slots are numbered across named and bare ``?`` tokens alike, in
    left-to-right order, so a name that follows two bare ``?`` lands on
    slot 2.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    sql: str
    positions: dict[str, tuple[int, ...]]
    positional: tuple[int, ...]
    slot_count: int

    @classmethod
    def parse(cls, text: str) -> "SqlTemplate":
        """Rewrite every ``:name`` in ``text`` to ``?`` and record its slots."""
        positions: dict[str, list[int]] = {}
        positional: list[int] = []
        slot = 0

        def _replace(match: re.Match[str]) -> str:
            nonlocal slot
            name = match.group(1)
            if name is not None:
                positions.setdefault(name, []).append(slot)
            else:
                positional.append(slot)
            slot += 1
            return "?"

        sql = _PLACEHOLDER_RE.sub(_replace, text)
        return cls(
            text=text,
            sql=sql,
            positions={name: tuple(slots) for name, slots in positions.items()},
            positional=tuple(positional),
            slot_count=slot,
        )

    @property
    def names(self) -> list[str]:
        """Placeholder names in order of first appearance."""
        return list(self.positions)

    def slots_for(self, name: str) -> tuple[int, ...]:
        """Return the slots bound by ``name`` (with or without leading colon)."""
        key = name.removeprefix(":")
        try:
            return self.positions[key]
        except KeyError:
            raise ParameterNotFoundError(key) from None
