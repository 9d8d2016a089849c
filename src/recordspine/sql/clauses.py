"""Clause mixins shared by the query variants.

Each mixin owns one piece of query state and knows how to render its own
fragment.  The query classes in :mod:`recordspine.sql.query` combine them::

    Select  = TableName* + Where + Having + Paginate   (*via from_())
    Insert  = TableName + Values
    Update  = TableName + Values + Where + Paginate
    Delete  = TableName + Where + Paginate

Mixins initialise their state lazily through ``_init_<clause>()`` methods
called from the query constructors and ``reset()``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from recordspine.dialect import Dialect
from recordspine.errors import DialectRequiredError, QueryError
from recordspine.sql.conditions import ConditionBuilder, ConditionNode, GroupCallback


class TableName:
    """Target table for INSERT / UPDATE / DELETE."""

    _table: str | None

    def _init_table(self) -> None:
        self._table = None

    def table(self, name: str) -> Any:
        """Set the table this query acts on."""
        if not name:
            raise QueryError("Table name must be a non-empty string")
        self._table = name
        return self

    def get_table(self) -> str | None:
        return self._table


class Values:
    """Ordered column → value map for INSERT and UPDATE."""

    _values: dict[str, Any]

    def _init_values(self) -> None:
        self._values = {}

    def values(self, values: Mapping[str, Any]) -> Any:
        """Merge ``values`` into the current map (later keys win)."""
        self._values.update(values)
        return self

    def value(self, field: str, value: Any) -> Any:
        """Set a single column value."""
        self._values[field] = value
        return self

    def get_values(self) -> dict[str, Any]:
        return dict(self._values)

    def get_value(self, field: str, default: Any = None) -> Any:
        return self._values.get(field, default)

    def reset_values(self) -> Any:
        self._values = {}
        return self


class Where:
    """WHERE clause backed by a :class:`ConditionBuilder`."""

    _where: ConditionBuilder

    def _init_where(self) -> None:
        self._where = ConditionBuilder()

    def where(
        self,
        field: str | GroupCallback,
        operator: str | None = None,
        value: Any = None,
    ) -> Any:
        """Add an ``AND`` condition; pass a callable to build a group::

            query.where(lambda g: g.and_with("user", "=", "Alex")
                                   .and_with("country", "=", "GB"))
        """
        self._where.and_with(field, operator, value)
        return self

    def or_where(
        self,
        field: str | GroupCallback,
        operator: str | None = None,
        value: Any = None,
    ) -> Any:
        """Add an ``OR`` condition."""
        self._where.or_with(field, operator, value)
        return self

    def where_conditions(self) -> tuple[ConditionNode, ...]:
        return self._where.conditions()

    def where_params(self) -> list[Any]:
        return self._where.parameters()

    def has_where(self) -> bool:
        return self._where.has_conditions()

    def build_where_sql(self, dialect: Dialect | None) -> str:
        """``WHERE <conditions>``, or ``''`` when there are none."""
        if dialect is None:
            raise DialectRequiredError()
        if not self._where.has_conditions():
            return ""
        return f"WHERE {self._where.render(dialect)}"

    def reset_where(self) -> Any:
        self._where.reset()
        return self


class Having:
    """HAVING clause backed by a :class:`ConditionBuilder`."""

    _having: ConditionBuilder

    def _init_having(self) -> None:
        self._having = ConditionBuilder()

    def having(
        self,
        field: str | GroupCallback,
        operator: str | None = None,
        value: Any = None,
    ) -> Any:
        """Add an ``AND`` condition to the HAVING clause."""
        self._having.and_with(field, operator, value)
        return self

    def or_having(
        self,
        field: str | GroupCallback,
        operator: str | None = None,
        value: Any = None,
    ) -> Any:
        """Add an ``OR`` condition to the HAVING clause."""
        self._having.or_with(field, operator, value)
        return self

    def having_conditions(self) -> tuple[ConditionNode, ...]:
        return self._having.conditions()

    def having_params(self) -> list[Any]:
        return self._having.parameters()

    def has_having(self) -> bool:
        return self._having.has_conditions()

    def build_having_sql(self, dialect: Dialect | None) -> str:
        """``HAVING <conditions>``, or ``''`` when there are none."""
        if dialect is None:
            raise DialectRequiredError()
        if not self._having.has_conditions():
            return ""
        return f"HAVING {self._having.render(dialect)}"

    def reset_having(self) -> Any:
        self._having.reset()
        return self


class Paginate:
    """LIMIT / OFFSET, rendered by the dialect."""

    _limit: int | None
    _offset: int

    def _init_paginate(self) -> None:
        self._limit = None
        self._offset = 0

    def limit(self, limit: int) -> Any:
        limit = int(limit)
        if limit < 0:
            raise QueryError(f"Limit must not be negative, got {limit}")
        self._limit = limit
        return self

    def offset(self, offset: int) -> Any:
        offset = int(offset)
        if offset < 0:
            raise QueryError(f"Offset must not be negative, got {offset}")
        self._offset = offset
        return self

    def get_limit(self) -> int | None:
        return self._limit

    def get_offset(self) -> int:
        return self._offset

    def reset_limit(self) -> Any:
        self._limit = None
        return self

    def reset_offset(self) -> Any:
        self._offset = 0
        return self

    def build_paginate_sql(self, dialect: Dialect | None) -> str:
        """Dialect-specific ``LIMIT`` fragment, or ``''`` without a limit."""
        if dialect is None:
            raise DialectRequiredError()
        return dialect.limit_clause(self._limit, self._offset)


__all__ = [
    "TableName",
    "Values",
    "Where",
    "Having",
    "Paginate",
]
