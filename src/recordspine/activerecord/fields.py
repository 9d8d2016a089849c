"""Field descriptors: per-field transform hooks and validation rules.

A field is consulted at three points of a model's life:

==========  =========================================  ======================
Hook        Called by                                  Typical use
==========  =========================================  ======================
``on_set``  ``Model.set()`` before writing ``changed``  normalise user input
``on_get``  ``Model.get()`` / ``Model.original()``      present stored values
``on_save`` create, update and ``validate()``           value sent to the DB
==========  =========================================  ======================

Rules are ``(rule_name, *args)`` tuples understood by
:mod:`recordspine.activerecord.validation`::

    Text(rules=[("required",), ("lengthMax", 64)])
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from recordspine.activerecord.model import Model

Rule = tuple[Any, ...]


def _normalise_rules(rules: Iterable[Any] | None) -> tuple[Rule, ...]:
    normalised = []
    for rule in rules or ():
        if isinstance(rule, str) or callable(rule):
            rule = (rule,)
        normalised.append(tuple(rule))
    return tuple(normalised)


class Field:
    """Pass-through field: every hook returns the value unchanged."""

    def __init__(self, rules: Iterable[Any] | None = None) -> None:
        self._rules = _normalise_rules(rules)

    def on_set(self, model: Model, key: str, value: Any) -> Any:
        return value

    def on_get(self, model: Model, key: str, value: Any) -> Any:
        return value

    def on_save(self, model: Model, key: str, value: Any) -> Any:
        return value

    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rules={list(self._rules)!r})"


class Text(Field):
    """String column."""

    def on_set(self, model: Model, key: str, value: Any) -> Any:
        return value if value is None else str(value)


class Integer(Field):
    """Integer column; blank strings become ``None``."""

    def on_set(self, model: Model, key: str, value: Any) -> Any:
        if value is None or value == "":
            return None
        return int(value)


class Boolean(Field):
    """Boolean column, persisted as ``0``/``1``."""

    def on_set(self, model: Model, key: str, value: Any) -> Any:
        return value if value is None else bool(value)

    def on_get(self, model: Model, key: str, value: Any) -> Any:
        return value if value is None else bool(value)

    def on_save(self, model: Model, key: str, value: Any) -> Any:
        return value if value is None else int(bool(value))


class DateTime(Field):
    """Timestamp column, stored as an ISO-8601 string.

    Accepts ``datetime`` objects or ISO strings; always hands back a
    ``datetime``.
    """

    def _parse(self, value: Any) -> Any:
        if value is None or isinstance(value, datetime):
            return value
        return datetime.fromisoformat(str(value))

    def on_set(self, model: Model, key: str, value: Any) -> Any:
        return self._parse(value)

    def on_get(self, model: Model, key: str, value: Any) -> Any:
        return self._parse(value)

    def on_save(self, model: Model, key: str, value: Any) -> Any:
        value = self._parse(value)
        return value if value is None else value.isoformat()


__all__ = ["Field", "Text", "Integer", "Boolean", "DateTime", "Rule"]
