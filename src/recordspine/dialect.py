"""SQL dialect abstraction for identifier quoting and pagination.

Provides a ``Dialect`` protocol and concrete implementations for every
supported database engine.  The condition builder and the query variants
ask the dialect how to quote identifiers and tables and how to spell
``LIMIT``/``OFFSET``; nothing else in the package knows which engine it
is talking to.

Manifesto:
    Query building must be portable across engines.  Identifier quoting is
    the one place where engines disagree on the *shape* of otherwise
    identical SQL, so it lives behind a single interface.

    - **One interface:** Dialect protocol for all engine-specific fragments
    - **Stateless:** Dialects are pure, deterministic and shareable
    - **One placeholder:** Rendered SQL always uses ``?``; translating it is
      the connection's job, not the dialect's

Architecture::

    ┌──────────────────────────────────────────────────────────────────┐
    │                     Dialect Abstraction Layer                     │
    └──────────────────────────────────────────────────────────────────┘

    Query Code:
    ┌────────────────────────────────────────────────────────────────┐
    │  sql = f"DELETE FROM {d.quote_table('users')}"                 │
    │  sql += f" WHERE {d.quote_identifier('id')} = ?"               │
    └────────────────────────────────────────────────────────────────┘
                              │
                              ▼
    ┌──────────┐ ┌──────────┐ ┌──────────────┐ ┌──────────────────┐
    │  ANSI    │ │ SQLite   │ │ PostgreSQL   │ │ MySQL            │
    │ "users"  │ │ "users"  │ │ "users"      │ │ `users`          │
    │ LIMIT n  │ │ LIMIT n  │ │ LIMIT n      │ │ LIMIT offset, n  │
    │ OFFSET m │ │ OFFSET m │ │ OFFSET m     │ │                  │
    └──────────┘ └──────────┘ └──────────────┘ └──────────────────┘

Examples:
    >>> from recordspine.dialect import get_dialect
    >>> d = get_dialect("ansi")
    >>> d.quote_identifier("users.name")
    '"users"."name"'
    >>> d.limit_clause(10, 20)
    'LIMIT 10 OFFSET 20'

Tags:
    dialect, sql, quoting, portability, record-spine
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a **SQL fragment** (string) that is valid for the
    target database.  Implementations must be deterministic and free of
    side effects.
    """

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'ansi'``)."""
        ...

    def quote_identifier(self, name: str) -> str:
        """Quote a column reference.

        Dotted references are quoted per part and ``*`` is left alone:

        >>> dialect.quote_identifier("u.name")
        '"u"."name"'
        >>> dialect.quote_identifier("u.*")
        '"u".*'
        """
        ...

    def quote_table(self, name: str) -> str:
        """Quote a table reference (``schema.table`` is quoted per part)."""
        ...

    def limit_clause(self, limit: int | None, offset: int = 0) -> str:
        """``LIMIT``/``OFFSET`` fragment, or ``''`` when ``limit`` is ``None``."""
        ...


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class ANSIDialect:
    """ANSI SQL: double-quoted identifiers, ``LIMIT n OFFSET m``."""

    quote_char = '"'

    @property
    def name(self) -> str:
        return "ansi"

    # -- Quoting -----------------------------------------------------------

    def _quote_part(self, part: str) -> str:
        if part == "*":
            return part
        q = self.quote_char
        return f"{q}{part.replace(q, q * 2)}{q}"

    def quote_identifier(self, name: str) -> str:
        return ".".join(self._quote_part(p) for p in name.split("."))

    def quote_table(self, name: str) -> str:
        return ".".join(self._quote_part(p) for p in name.split("."))

    # -- Pagination --------------------------------------------------------

    def limit_clause(self, limit: int | None, offset: int = 0) -> str:
        if limit is None:
            return ""
        if offset:
            return f"LIMIT {limit} OFFSET {offset}"
        return f"LIMIT {limit}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class SQLiteDialect(ANSIDialect):
    """SQLite: ANSI quoting and pagination."""

    @property
    def name(self) -> str:
        return "sqlite"


class PostgreSQLDialect(ANSIDialect):
    """PostgreSQL: ANSI quoting and pagination."""

    @property
    def name(self) -> str:
        return "postgresql"


class MySQLDialect(ANSIDialect):
    """MySQL: backtick identifiers, ``LIMIT offset, n``."""

    quote_char = "`"

    @property
    def name(self) -> str:
        return "mysql"

    def limit_clause(self, limit: int | None, offset: int = 0) -> str:
        if limit is None:
            return ""
        if offset:
            return f"LIMIT {offset}, {limit}"
        return f"LIMIT {limit}"


# =========================================================================
# Registry / Factory
# =========================================================================

# Pre-instantiated singletons (dialects are stateless)
_DIALECTS: dict[str, Dialect] = {
    "ansi": ANSIDialect(),
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
    "postgres": PostgreSQLDialect(),  # alias
    "mysql": MySQLDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Args:
        db_type: One of ``'ansi'``, ``'sqlite'``, ``'postgresql'``,
                 ``'postgres'``, ``'mysql'`` or a name added through
                 :func:`register_dialect`.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower()
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgres'})}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation.

    Useful for third-party engines or test doubles.
    """
    _DIALECTS[name.lower()] = dialect


__all__ = [
    # Protocol
    "Dialect",
    # Implementations
    "ANSIDialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "MySQLDialect",
    # Factory
    "get_dialect",
    "register_dialect",
]
