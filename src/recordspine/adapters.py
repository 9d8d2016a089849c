"""Connection adapters and the named connection registry.

Two ready-made implementations of :class:`~recordspine.protocols.Connection`:

* ``SqliteConnection``    -- wraps :mod:`sqlite3`, which accepts ``?`` natively.
* ``SAConnectionBridge``  -- wraps a SQLAlchemy ``Connection`` or ``Session``
  and rewrites ``?`` placeholders into named binds for ``text()``.

Models look their connection up by name (``"default"`` unless their
``Meta`` says otherwise), so applications register one at startup::

    from recordspine.adapters import SqliteConnection, register_connection

    register_connection("default", SqliteConnection("app.db"))

Tags:
    adapters, sqlite, sqlalchemy, connection, registry, record-spine
"""

from __future__ import annotations

import sqlite3
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Connection as SAConnection
from sqlalchemy.orm import Session

from recordspine.errors import ConnectionNotFoundError
from recordspine.logging import get_logger
from recordspine.protocols import Connection

logger = get_logger(__name__)


def _is_insert(sql: str) -> bool:
    return sql.lstrip()[:6].upper() == "INSERT"


# =========================================================================
# sqlite3
# =========================================================================


class SqliteConnection:
    """Adapter: ``sqlite3.Connection`` → ``Connection`` protocol.

    Rows come back as plain dicts.  Writes are committed immediately unless
    ``autocommit=False``, in which case the caller drives :meth:`commit`.
    """

    def __init__(self, path: str = ":memory:", *, autocommit: bool = True) -> None:
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._autocommit = autocommit

    # -- Connection protocol -----------------------------------------------

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        try:
            cursor = self._conn.execute(sql, tuple(params))
            if self._autocommit:
                self._conn.commit()
        except Exception:
            if self._autocommit:
                self._conn.rollback()
            raise
        return cursor.lastrowid if _is_insert(sql) else cursor.rowcount

    def fetch(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        row = self._conn.execute(sql, tuple(params)).fetchone()
        return dict(row) if row is not None else None

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        return [dict(row) for row in self._conn.execute(sql, tuple(params)).fetchall()]

    # -- convenience -------------------------------------------------------

    def executescript(self, script: str) -> None:
        """Run a multi-statement script (DDL for tests and fixtures)."""
        self._conn.executescript(script)

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()

    @property
    def raw(self) -> sqlite3.Connection:
        """Access the underlying ``sqlite3.Connection``."""
        return self._conn

    def __repr__(self) -> str:
        return f"SqliteConnection({self._conn!r})"


# =========================================================================
# SQLAlchemy
# =========================================================================


def rewrite_placeholders(sql: str) -> tuple[str, list[str]]:
    """Rewrite ``?`` into ``:p0``, ``:p1``... outside quoted sections.

    Returns the rewritten SQL and the bind names in order.
    """
    out: list[str] = []
    names: list[str] = []
    quote: str | None = None
    for ch in sql:
        if quote is not None:
            if ch == quote:
                quote = None
            out.append(ch)
        elif ch in ("'", '"', "`"):
            quote = ch
            out.append(ch)
        elif ch == "?":
            name = f"p{len(names)}"
            names.append(name)
            out.append(f":{name}")
        else:
            out.append(ch)
    return "".join(out), names


class SAConnectionBridge:
    """Adapter that makes a SQLAlchemy ``Connection`` or ``Session`` satisfy
    :class:`~recordspine.protocols.Connection`.

    Transaction boundaries stay with the caller: the bridge never commits.
    """

    def __init__(self, target: SAConnection | Session) -> None:
        self._target = target

    def _run(self, sql: str, params: Sequence[Any]) -> Any:
        rewritten, names = rewrite_placeholders(sql)
        if len(names) != len(params):
            raise ValueError(
                f"Statement has {len(names)} placeholder(s) but {len(params)} parameter(s)"
            )
        return self._target.execute(text(rewritten), dict(zip(names, params)))

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        result = self._run(sql, params)
        if _is_insert(sql):
            return getattr(result, "lastrowid", None)
        return result.rowcount

    def fetch(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        row = self._run(sql, params).mappings().first()
        return dict(row) if row is not None else None

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        return [dict(row) for row in self._run(sql, params).mappings().all()]

    @property
    def target(self) -> SAConnection | Session:
        """The wrapped SQLAlchemy connection or session."""
        return self._target


# =========================================================================
# Named connection registry
# =========================================================================

_CONNECTIONS: dict[str, Connection] = {}


def register_connection(name: str, connection: Connection) -> None:
    """Register ``connection`` under ``name`` (replacing any previous one)."""
    _CONNECTIONS[name] = connection
    logger.debug("connection.registered", name=name, adapter=type(connection).__name__)


def get_connection(name: str = "default") -> Connection:
    """Look up a registered connection.

    Raises:
        ConnectionNotFoundError: If nothing is registered under ``name``.
    """
    try:
        return _CONNECTIONS[name]
    except KeyError:
        raise ConnectionNotFoundError(name) from None


def unregister_connection(name: str) -> None:
    _CONNECTIONS.pop(name, None)


def clear_connections() -> None:
    """Remove every registered connection (test isolation)."""
    _CONNECTIONS.clear()


def registered_connections() -> Mapping[str, Connection]:
    return dict(_CONNECTIONS)


__all__ = [
    "SqliteConnection",
    "SAConnectionBridge",
    "rewrite_placeholders",
    "register_connection",
    "get_connection",
    "unregister_connection",
    "clear_connections",
    "registered_connections",
]
