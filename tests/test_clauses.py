"""Tests for the clause mixins: Where, Having, Paginate, TableName, Values."""

from __future__ import annotations

import pytest

from recordspine.dialect import ANSIDialect, MySQLDialect
from recordspine.errors import DialectRequiredError, QueryError
from recordspine.sql.clauses import Having, Paginate, TableName, Values, Where


class WhereOnly(Where):
    def __init__(self) -> None:
        self._init_where()


class HavingOnly(Having):
    def __init__(self) -> None:
        self._init_having()


class PaginateOnly(Paginate):
    def __init__(self) -> None:
        self._init_paginate()


class TableValues(TableName, Values):
    def __init__(self) -> None:
        self._init_table()
        self._init_values()


def _dicts(nodes):
    return [node.as_dict() for node in nodes]


# =========================================================================
# WHERE
# =========================================================================


class TestWhere:
    def test_no_where(self, ansi: ANSIDialect) -> None:
        w = WhereOnly()
        assert w.build_where_sql(ansi) == ""
        assert w.where_conditions() == ()

    def test_simple_where(self, ansi: ANSIDialect) -> None:
        w = WhereOnly()
        assert w.where("name", "=", "Alex") is w
        assert w.build_where_sql(ansi) == 'WHERE "name" = ?'
        assert w.where_params() == ["Alex"]
        assert _dicts(w.where_conditions()) == [
            {"join": "AND", "field": "name", "operator": "=", "value": "Alex"}
        ]

    def test_simple_or(self, ansi: ANSIDialect) -> None:
        w = WhereOnly().where("name", "=", "Alex").or_where("name", "=", "Alexander")
        assert w.build_where_sql(ansi) == 'WHERE "name" = ? OR "name" = ?'
        assert w.where_params() == ["Alex", "Alexander"]

    def test_only_or(self, ansi: ANSIDialect) -> None:
        w = WhereOnly().or_where("name", "=", "Alex")
        assert w.build_where_sql(ansi) == 'WHERE "name" = ?'
        assert w.where_conditions()[0].as_dict()["join"] == "OR"

    def test_complex(self, ansi: ANSIDialect) -> None:
        w = WhereOnly()
        (
            w.where("name", "=", "Alex")
            .or_where("name", "=", "Lucie")
            .where(lambda q: q.and_with("city", "=", "London").and_with("country", "=", "GB"))
            .or_where(
                lambda q: q.and_with("city", "=", "Toronto")
                .and_with("country", "=", "CA")
                .or_with(lambda q2: q2.and_with("active", "!=", True))
            )
        )

        assert w.build_where_sql(ansi) == (
            'WHERE "name" = ? OR "name" = ? AND ("city" = ? AND "country" = ?) '
            'OR ("city" = ? AND "country" = ? OR ("active" != ?))'
        )
        assert w.where_params() == ["Alex", "Lucie", "London", "GB", "Toronto", "CA", True]
        assert _dicts(w.where_conditions()) == [
            {"join": "AND", "field": "name", "operator": "=", "value": "Alex"},
            {"join": "OR", "field": "name", "operator": "=", "value": "Lucie"},
            {
                "join": "AND",
                "sub": [
                    {"join": "AND", "field": "city", "operator": "=", "value": "London"},
                    {"join": "AND", "field": "country", "operator": "=", "value": "GB"},
                ],
            },
            {
                "join": "OR",
                "sub": [
                    {"join": "AND", "field": "city", "operator": "=", "value": "Toronto"},
                    {"join": "AND", "field": "country", "operator": "=", "value": "CA"},
                    {
                        "join": "OR",
                        "sub": [{"join": "AND", "field": "active", "operator": "!=", "value": True}],
                    },
                ],
            },
        ]

    def test_reset_where(self) -> None:
        w = WhereOnly().where("name", "=", "Alex").where("age", ">", 18)
        assert len(w.where_conditions()) == 2
        assert w.reset_where() is w
        assert w.where_conditions() == ()
        assert w.where_params() == []

    def test_dialect_required(self) -> None:
        with pytest.raises(DialectRequiredError):
            WhereOnly().build_where_sql(None)


# =========================================================================
# HAVING
# =========================================================================


class TestHaving:
    def test_no_having(self, ansi: ANSIDialect) -> None:
        assert HavingOnly().build_having_sql(ansi) == ""

    def test_simple_having(self, ansi: ANSIDialect) -> None:
        h = HavingOnly().having("total", ">", 100).or_having("total", "<", 5)
        assert h.build_having_sql(ansi) == 'HAVING "total" > ? OR "total" < ?'
        assert h.having_params() == [100, 5]

    def test_group(self, ansi: ANSIDialect) -> None:
        h = HavingOnly().having("a", "=", 1).having(lambda q: q.and_with("b", "=", 2).or_with("c", "=", 3))
        assert h.build_having_sql(ansi) == 'HAVING "a" = ? AND ("b" = ? OR "c" = ?)'
        assert h.having_params() == [1, 2, 3]

    def test_reset_having(self) -> None:
        h = HavingOnly().having("a", "=", 1)
        h.reset_having()
        assert not h.has_having()
        assert h.having_params() == []


# =========================================================================
# LIMIT / OFFSET
# =========================================================================


class TestPaginate:
    def test_defaults(self, ansi: ANSIDialect) -> None:
        p = PaginateOnly()
        assert p.get_limit() is None
        assert p.get_offset() == 0
        assert p.build_paginate_sql(ansi) == ""

    def test_limit(self, ansi: ANSIDialect) -> None:
        assert PaginateOnly().limit(10).build_paginate_sql(ansi) == "LIMIT 10"

    def test_limit_offset(self, ansi: ANSIDialect) -> None:
        assert PaginateOnly().limit(10).offset(30).build_paginate_sql(ansi) == "LIMIT 10 OFFSET 30"

    def test_mysql_form(self, mysql: MySQLDialect) -> None:
        assert PaginateOnly().limit(10).offset(30).build_paginate_sql(mysql) == "LIMIT 30, 10"

    def test_offset_without_limit_renders_nothing(self, ansi: ANSIDialect) -> None:
        assert PaginateOnly().offset(30).build_paginate_sql(ansi) == ""

    @pytest.mark.parametrize("method", ["limit", "offset"])
    def test_negative_rejected(self, method: str) -> None:
        with pytest.raises(QueryError, match="must not be negative"):
            getattr(PaginateOnly(), method)(-1)

    def test_resets(self) -> None:
        p = PaginateOnly().limit(5).offset(10)
        p.reset_limit().reset_offset()
        assert p.get_limit() is None
        assert p.get_offset() == 0


# =========================================================================
# TABLE / VALUES
# =========================================================================


class TestTableValues:
    def test_table(self) -> None:
        q = TableValues()
        assert q.get_table() is None
        assert q.table("users") is q
        assert q.get_table() == "users"

    def test_empty_table_rejected(self) -> None:
        with pytest.raises(QueryError):
            TableValues().table("")

    def test_values_merge_and_keep_order(self) -> None:
        q = TableValues().values({"name": "Alex", "age": 30}).value("city", "London")
        q.values({"name": "Lucie"})
        assert q.get_values() == {"name": "Lucie", "age": 30, "city": "London"}
        assert list(q.get_values()) == ["name", "age", "city"]
        assert q.get_value("age") == 30
        assert q.get_value("missing", "x") == "x"

    def test_reset_values(self) -> None:
        q = TableValues().values({"name": "Alex"})
        q.reset_values()
        assert q.get_values() == {}


# =========================================================================
# Placeholder / parameter alignment
# =========================================================================


class TestParameterAlignment:
    def test_or_group_example(self, ansi: ANSIDialect) -> None:
        w = WhereOnly().where("age", ">", 18).or_where(
            lambda g: g.and_with("city", "=", "London").and_with("active", "=", True)
        )
        assert w.build_where_sql(ansi) == 'WHERE "age" > ? OR ("city" = ? AND "active" = ?)'
        assert w.where_params() == [18, "London", True]

    @pytest.mark.parametrize("depth", [1, 2, 5])
    def test_placeholder_count_matches_params(self, ansi: ANSIDialect, depth: int) -> None:
        def nest(level):
            def fill(g):
                g.and_with(f"a{level}", "=", level).or_with(f"b{level}", "<", -level)
                if level < depth:
                    g.and_with(nest(level + 1))

            return fill

        w = WhereOnly().where("root", "=", 0).or_where(nest(1))
        sql = w.build_where_sql(ansi)
        assert sql.count("?") == len(w.where_params())
        assert w.where_params() == [0] + [v for level in range(1, depth + 1) for v in (level, -level)]

    def test_render_is_idempotent(self, ansi: ANSIDialect) -> None:
        w = WhereOnly().where("a", "=", 1).or_where(lambda g: g.and_with("b", "=", 2))
        assert w.build_where_sql(ansi) == w.build_where_sql(ansi)
        assert w.where_params() == [1, 2]
