"""Query variants: SELECT, INSERT, UPDATE and DELETE.

Each variant combines clause mixins from :mod:`recordspine.sql.clauses`
and renders a complete statement plus the parameter list that goes with
it.  Rendered SQL always uses ``?`` placeholders, and :meth:`Query.params`
always returns the values in the order those placeholders appear.

Manifesto:
    Building SQL should never be the thing that fails at runtime.  Bad
    input (an unknown join type, a bad sort direction) is rejected by the
    call that supplied it; rendering itself only ever omits what is not
    there.

    - **Optional clauses vanish:** no ``WHERE`` without conditions
    - **No table, no SQL:** a query without its table renders ``''``
    - **Placeholders and params agree:** UPDATE binds SET values first,
      then WHERE values, exactly as they appear in the statement

Architecture::

    Select
    ┌─────────────────────────────────────────────────────────────────┐
    │ SELECT cols FROM table [AS alias]                               │
    │   [INNER|LEFT|RIGHT JOIN t [AS a] ON ...]*                      │
    │   [WHERE ...] [GROUP BY ...] [HAVING ...] [ORDER BY ...] [LIMIT]│
    │ params = where params + having params                           │
    └─────────────────────────────────────────────────────────────────┘
    Insert   INSERT INTO t (cols) VALUES (?, ...)      params = values
    Update   UPDATE t SET c = ?, ... [WHERE] [LIMIT]   params = values + where
    Delete   DELETE FROM t [WHERE] [LIMIT]             params = where

Examples:
    >>> q = Delete().table("users").where("id", "=", 27).limit(1)
    >>> str(q)
    'DELETE FROM "users" WHERE "id" = ? LIMIT 1'
    >>> q.params()
    [27]

Tags:
    sql, query-builder, select, insert, update, delete, record-spine
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from recordspine.dialect import Dialect, get_dialect
from recordspine.errors import DialectRequiredError, QueryError
from recordspine.logging import get_logger
from recordspine.protocols import Connection
from recordspine.settings import get_settings
from recordspine.sql.clauses import Having, Paginate, TableName, Values, Where
from recordspine.sql.expression import Expression

logger = get_logger(__name__)


class JoinType(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class JoinSpec:
    """One ``JOIN`` entry of a :class:`Select`."""

    type: JoinType
    left: str
    right: str
    predicate: str
    right_alias: str | None = None


def _check_alias(alias: str | None) -> str | None:
    if alias is not None and (not isinstance(alias, str) or not alias.strip()):
        raise QueryError(f"Alias must be a non-empty string, got {alias!r}")
    return alias


# =========================================================================
# Base
# =========================================================================


class Query:
    """Base class for all query variants.

    Parameters:
        dialect: Dialect used to quote identifiers.  Defaults to the
                 configured ``RECORDSPINE_DEFAULT_DIALECT`` (``ansi``).
    """

    def __init__(self, dialect: Dialect | None = None) -> None:
        self.dialect: Dialect | None = dialect or get_dialect(get_settings().default_dialect)
        self.reset()

    # -- Rendering ---------------------------------------------------------

    def sql(self) -> str:
        """Render the full statement, or ``''`` when a required part is missing.

        Raises:
            DialectRequiredError: If the query has no dialect.
        """
        if self.dialect is None:
            raise DialectRequiredError(
                f"{self.__class__.__name__} has no dialect to render with"
            )
        return " ".join(part for part in self._parts(self.dialect) if part)

    def _parts(self, dialect: Dialect) -> list[str]:
        raise NotImplementedError

    def params(self) -> list[Any]:
        """Bound values in placeholder order."""
        raise NotImplementedError

    def reset(self) -> Query:
        """Clear all state back to construction defaults."""
        raise NotImplementedError

    # -- Execution ---------------------------------------------------------

    def execute(self, connection: Connection) -> Any:
        """Run the statement on ``connection``; returns its ``execute`` result."""
        sql, params = self.sql(), self.params()
        self._log_execute(sql, params)
        return connection.execute(sql, params)

    def _log_execute(self, sql: str, params: list[Any]) -> None:
        if get_settings().log_sql:
            logger.debug("query.execute", query=self.__class__.__name__, sql=sql, params=len(params))
        else:
            logger.debug("query.execute", query=self.__class__.__name__, params=len(params))

    def __str__(self) -> str:
        return self.sql()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.sql()!r}, params={self.params()!r})"


# =========================================================================
# SELECT
# =========================================================================


class Select(Query, Where, Having, Paginate):
    """SELECT with joins, grouping, ordering and pagination."""

    def reset(self) -> Select:
        self._columns: list[tuple[str | Expression, str | None]] = []
        self._from: str | None = None
        self._from_alias: str | None = None
        self._joins: list[JoinSpec] = []
        self._order_by: dict[str, SortDirection] = {}
        self._group_by: list[str] = []
        self._flags: dict[str, Any] = {}
        self._init_where()
        self._init_having()
        self._init_paginate()
        return self

    # -- Columns -----------------------------------------------------------

    def select(
        self,
        columns: str | Expression | list[str | Expression] | tuple[str | Expression, ...],
        alias: str | None = None,
    ) -> Select:
        """Add one column (optionally aliased) or a list of columns."""
        if isinstance(columns, (list, tuple)):
            if alias is not None:
                raise QueryError("An alias can only be given for a single column")
            for column in columns:
                self.select(column)
            return self
        self._columns.append((columns, _check_alias(alias)))
        return self

    def get_select(self) -> list[tuple[str | Expression, str | None]]:
        return list(self._columns)

    def reset_select(self) -> Select:
        self._columns = []
        return self

    # -- FROM / JOIN -------------------------------------------------------

    def from_(self, table: str, alias: str | None = None) -> Select:
        if not table:
            raise QueryError("Table name must be a non-empty string")
        self._from = table
        self._from_alias = _check_alias(alias)
        return self

    def get_from(self) -> tuple[str | None, str | None]:
        return self._from, self._from_alias

    def join(
        self,
        left: str,
        right: str,
        predicate: str,
        type: JoinType | str = JoinType.INNER,
        right_alias: str | None = None,
    ) -> Select:
        """Join ``right`` onto ``left`` using a raw ``ON`` predicate.

        ``left`` must name a table (or alias) already in the query: the FROM
        table or an earlier join.  Joining a table that is already part of
        the query requires ``right_alias``.
        """
        try:
            join_type = JoinType(str(type.value if isinstance(type, JoinType) else type).upper())
        except ValueError:
            raise QueryError(
                f"Unknown join type {type!r}; expected one of {[t.value for t in JoinType]}",
                context={"right": right},
            ) from None

        if left not in self._known_sources():
            raise QueryError(
                f"Cannot join from {left!r}; it is not the FROM table or an earlier join",
                context={"left": left, "right": right},
            )

        right_alias = _check_alias(right_alias)
        if right_alias is None and right in self._referenced_tables():
            raise QueryError(
                f"Table {right!r} is already part of the query; an alias is required to join it again",
                context={"right": right},
            )
        if not predicate:
            raise QueryError(f"Join onto {right!r} needs a predicate", context={"right": right})

        self._joins.append(
            JoinSpec(type=join_type, left=left, right=right, predicate=predicate, right_alias=right_alias)
        )
        return self

    def _referenced_tables(self) -> set[str]:
        tables = set()
        if self._from is not None and self._from_alias is None:
            tables.add(self._from)
        tables.update(j.right for j in self._joins if j.right_alias is None)
        return tables

    def _known_sources(self) -> set[str]:
        sources = {self._from, self._from_alias}
        for j in self._joins:
            sources.update((j.right, j.right_alias))
        sources.discard(None)
        return sources  # type: ignore[return-value]

    def get_joins(self) -> list[JoinSpec]:
        return list(self._joins)

    def reset_joins(self) -> Select:
        self._joins = []
        return self

    # -- ORDER BY / GROUP BY -----------------------------------------------

    def order_by(self, field: str, direction: SortDirection | str = SortDirection.ASC) -> Select:
        try:
            value = direction.value if isinstance(direction, SortDirection) else str(direction).upper()
            self._order_by[field] = SortDirection(value)
        except ValueError:
            raise QueryError(
                f"Unknown sort direction {direction!r} for {field!r}",
                context={"field": field},
            ) from None
        return self

    def get_order_by(self) -> dict[str, str]:
        return {field: direction.value for field, direction in self._order_by.items()}

    def reset_order_by(self) -> Select:
        self._order_by = {}
        return self

    def group_by(self, *fields: str) -> Select:
        self._group_by.extend(fields)
        return self

    def get_group_by(self) -> list[str]:
        return list(self._group_by)

    def reset_group_by(self) -> Select:
        self._group_by = []
        return self

    # -- Flags -------------------------------------------------------------

    def flag(self, name: str, value: Any) -> Select:
        """Attach caller metadata (e.g. ``fetch='one'``); never rendered."""
        self._flags[name] = value
        return self

    def get_flag(self, name: str, default: Any = None) -> Any:
        return self._flags.get(name, default)

    # -- Rendering ---------------------------------------------------------

    def _column_sql(self, dialect: Dialect, column: str | Expression, alias: str | None) -> str:
        sql = str(column) if isinstance(column, Expression) else dialect.quote_identifier(column)
        if alias:
            sql += f" AS {dialect.quote_identifier(alias)}"
        return sql

    def _parts(self, dialect: Dialect) -> list[str]:
        if self._from is None:
            return []

        columns = ", ".join(self._column_sql(dialect, c, a) for c, a in self._columns) or "*"
        source = dialect.quote_table(self._from)
        if self._from_alias:
            source += f" AS {dialect.quote_identifier(self._from_alias)}"

        parts = [f"SELECT {columns}", f"FROM {source}"]
        for j in self._joins:
            target = dialect.quote_table(j.right)
            if j.right_alias:
                target += f" AS {dialect.quote_identifier(j.right_alias)}"
            parts.append(f"{j.type.value} JOIN {target} ON {j.predicate}")

        parts.append(self.build_where_sql(dialect))
        if self._group_by:
            parts.append("GROUP BY " + ", ".join(dialect.quote_identifier(f) for f in self._group_by))
        parts.append(self.build_having_sql(dialect))
        if self._order_by:
            parts.append(
                "ORDER BY "
                + ", ".join(
                    f"{dialect.quote_identifier(f)} {d.value}" for f, d in self._order_by.items()
                )
            )
        parts.append(self.build_paginate_sql(dialect))
        return parts

    def params(self) -> list[Any]:
        return self.where_params() + self.having_params()

    # -- Execution ---------------------------------------------------------

    def fetch_rows(self, connection: Connection) -> list[Any]:
        """Run the SELECT and return every row."""
        sql, params = self.sql(), self.params()
        self._log_execute(sql, params)
        return list(connection.fetch_all(sql, params))

    def fetch_row(self, connection: Connection) -> Any:
        """Run the SELECT and return the first row (or ``None``)."""
        sql, params = self.sql(), self.params()
        self._log_execute(sql, params)
        return connection.fetch(sql, params)


# =========================================================================
# INSERT / UPDATE / DELETE
# =========================================================================


class Insert(Query, TableName, Values):
    """INSERT INTO ... VALUES (...)."""

    def reset(self) -> Insert:
        self._init_table()
        self._init_values()
        return self

    def _parts(self, dialect: Dialect) -> list[str]:
        if self._table is None or not self._values:
            return []
        columns = ", ".join(dialect.quote_identifier(f) for f in self._values)
        placeholders = ", ".join("?" for _ in self._values)
        return [
            "INSERT INTO",
            dialect.quote_table(self._table),
            f"({columns}) VALUES ({placeholders})",
        ]

    def params(self) -> list[Any]:
        return list(self._values.values())


class Update(Query, TableName, Values, Where, Paginate):
    """UPDATE ... SET ... WHERE ... LIMIT."""

    def reset(self) -> Update:
        self._init_table()
        self._init_values()
        self._init_where()
        self._init_paginate()
        return self

    def _parts(self, dialect: Dialect) -> list[str]:
        if self._table is None:
            return []
        parts = ["UPDATE", dialect.quote_table(self._table)]
        if self._values:
            parts.append("SET " + ", ".join(f"{dialect.quote_identifier(f)} = ?" for f in self._values))
        parts.append(self.build_where_sql(dialect))
        parts.append(self.build_paginate_sql(dialect))
        return parts

    def params(self) -> list[Any]:
        # SET placeholders precede WHERE placeholders in the rendered statement
        return list(self._values.values()) + self.where_params()


class Delete(Query, TableName, Where, Paginate):
    """DELETE FROM ... WHERE ... LIMIT."""

    def reset(self) -> Delete:
        self._init_table()
        self._init_where()
        self._init_paginate()
        return self

    def _parts(self, dialect: Dialect) -> list[str]:
        if self._table is None:
            return []
        return [
            "DELETE FROM",
            dialect.quote_table(self._table),
            self.build_where_sql(dialect),
            self.build_paginate_sql(dialect),
        ]

    def params(self) -> list[Any]:
        return self.where_params()


__all__ = [
    "Query",
    "Select",
    "Insert",
    "Update",
    "Delete",
    "JoinType",
    "JoinSpec",
    "SortDirection",
]
