"""
Connection protocol consumed by the query and model layers.

The builder layer never talks to a database driver.  Anything with this
shape can execute what it renders: the adapters in
:mod:`recordspine.adapters`, a test double, or an application's own
wrapper around a pooled driver.

Architecture:
    ::

        Connection Protocol:
        ┌────────────────────────────────────────────────────────────┐
        │ execute(sql, params)   → last insert id (INSERT)           │
        │                          or affected row count (otherwise) │
        │ fetch(sql, params)     → first row as a mapping, or None   │
        │ fetch_all(sql, params) → every row as a mapping            │
        └────────────────────────────────────────────────────────────┘

    SQL handed to a connection always uses ``?`` positional placeholders.
    Translating them to the driver's paramstyle is the connection's job.
    Transactions, pooling, retries and timeouts are its job too.

Examples:
    >>> def count_users(conn: Connection) -> int:
    ...     row = conn.fetch('SELECT COUNT(*) AS n FROM "users"', [])
    ...     return row["n"] if row else 0

Tags:
    protocol, connection, database, record-spine
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """Minimal synchronous connection interface."""

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute a write statement.

        Returns the generated id for INSERT statements and the affected
        row count for everything else.
        """
        ...

    def fetch(self, sql: str, params: Sequence[Any] = ()) -> Mapping[str, Any] | None:
        """Execute a query and return its first row (or ``None``)."""
        ...

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[Mapping[str, Any]]:
        """Execute a query and return every row as a column → value mapping."""
        ...


__all__ = ["Connection"]
