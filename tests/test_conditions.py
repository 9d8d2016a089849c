"""Tests for ConditionBuilder: nested AND/OR trees and their parameters."""

from __future__ import annotations

import pytest

from recordspine.dialect import ANSIDialect
from recordspine.errors import DialectRequiredError, QueryError
from recordspine.sql.conditions import ConditionBuilder, Group, Join, Predicate


class TestBuilding:
    def test_empty(self, ansi: ANSIDialect) -> None:
        cb = ConditionBuilder()
        assert cb.conditions() == ()
        assert cb.parameters() == []
        assert not cb.has_conditions()
        assert cb.render(ansi) == ""

    def test_and_with_returns_self(self) -> None:
        cb = ConditionBuilder()
        assert cb.and_with("name", "=", "Alex") is cb

    def test_single_predicate(self, ansi: ANSIDialect) -> None:
        cb = ConditionBuilder().and_with("name", "=", "Alex")
        assert cb.conditions() == (Predicate(Join.AND, "name", "=", "Alex"),)
        assert cb.render(ansi) == '"name" = ?'
        assert cb.parameters() == ["Alex"]

    def test_leading_or_join_dropped_at_render(self, ansi: ANSIDialect) -> None:
        cb = ConditionBuilder().or_with("name", "=", "Alex")
        assert cb.conditions()[0].join is Join.OR
        assert cb.render(ansi) == '"name" = ?'

    def test_add_condition_accepts_string_join(self, ansi: ANSIDialect) -> None:
        cb = ConditionBuilder().add_condition("and", "a", "=", 1).add_condition("or", "b", "<", 2)
        assert cb.render(ansi) == '"a" = ? OR "b" < ?'

    def test_unknown_join(self) -> None:
        with pytest.raises(QueryError, match="Unknown condition join"):
            ConditionBuilder().add_condition("XOR", "a", "=", 1)

    def test_missing_operator(self) -> None:
        with pytest.raises(QueryError, match="missing an operator"):
            ConditionBuilder().and_with("name")

    def test_empty_field(self) -> None:
        with pytest.raises(QueryError):
            ConditionBuilder().and_with("", "=", 1)

    def test_none_value_is_still_a_parameter(self) -> None:
        cb = ConditionBuilder().and_with("deleted_at", "IS", None)
        assert cb.parameters() == [None]


class TestGroups:
    def test_group(self, ansi: ANSIDialect) -> None:
        cb = ConditionBuilder()
        cb.and_with("name", "=", "Alex")
        cb.and_with(lambda g: g.and_with("city", "=", "London").or_with("city", "=", "Toronto"))

        assert cb.render(ansi) == '"name" = ? AND ("city" = ? OR "city" = ?)'
        assert cb.parameters() == ["Alex", "London", "Toronto"]
        group = cb.conditions()[1]
        assert isinstance(group, Group)
        assert len(group.children) == 2

    def test_empty_group_contributes_nothing(self, ansi: ANSIDialect) -> None:
        cb = ConditionBuilder().and_with("a", "=", 1).or_with(lambda g: None)
        assert len(cb) == 1
        assert cb.render(ansi) == '"a" = ?'

    def test_deep_nesting_params_in_placeholder_order(self, ansi: ANSIDialect) -> None:
        cb = ConditionBuilder()
        cb.and_with("a", "=", 1)
        cb.or_with(
            lambda g: g.and_with("b", "=", 2).and_with(
                lambda h: h.and_with("c", "=", 3).or_with("d", "=", 4)
            )
        )
        cb.and_with("e", "=", 5)

        assert cb.render(ansi) == '"a" = ? OR ("b" = ? AND ("c" = ? OR "d" = ?)) AND "e" = ?'
        assert cb.parameters() == [1, 2, 3, 4, 5]

    def test_as_dict_uses_sub_for_groups(self) -> None:
        cb = ConditionBuilder().and_with(lambda g: g.and_with("active", "!=", True))
        assert cb.conditions()[0].as_dict() == {
            "join": "AND",
            "sub": [{"join": "AND", "field": "active", "operator": "!=", "value": True}],
        }


class TestRendering:
    def test_dialect_required(self) -> None:
        cb = ConditionBuilder().and_with("a", "=", 1)
        with pytest.raises(DialectRequiredError):
            cb.render(None)

    def test_dotted_field(self, ansi: ANSIDialect) -> None:
        cb = ConditionBuilder().and_with("users.id", ">", 10)
        assert cb.render(ansi) == '"users"."id" > ?'

    def test_reset(self) -> None:
        cb = ConditionBuilder().and_with("a", "=", 1)
        assert cb.reset() is cb
        assert cb.conditions() == ()
        assert cb.parameters() == []

    def test_parameters_is_a_copy(self) -> None:
        cb = ConditionBuilder().and_with("a", "=", 1)
        cb.parameters().append(99)
        assert cb.parameters() == [1]

    def test_repr(self) -> None:
        cb = ConditionBuilder().and_with("a", "=", 1)
        assert repr(cb) == "ConditionBuilder(nodes=1, parameters=1)"
