"""Raw SQL fragments that bypass identifier quoting."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Expression:
    """A literal SQL fragment, emitted exactly as given.

    Used where a column list needs something that is not an identifier,
    e.g. ``Expression("COUNT(id)")``.
    """

    sql: str

    def __str__(self) -> str:
        return self.sql


__all__ = ["Expression"]
