"""Recursive condition trees for WHERE and HAVING clauses.

A :class:`ConditionBuilder` holds an ordered sequence of condition nodes.
Each node is either a :class:`Predicate` (``field operator ?``) or a
:class:`Group` (a parenthesised sequence of nodes), and carries the
:class:`Join` that connects it to its left sibling.

Manifesto:
    The bound values must stay in lock-step with the rendered ``?``
    placeholders.  Rather than walking the tree twice (once for SQL, once
    for values) the builder captures each value at the moment the node is
    appended, in exactly the order the renderer will later emit its
    placeholder.

    - **Append-only:** Nodes are frozen; builders never rewrite history
    - **Captured by value:** Sub-groups are snapshotted when their
      callback returns; the child builder is discarded
    - **Parameters at build time:** ``render()`` never touches parameters

Architecture::

    builder.and_with("name", "=", "Alex")
    builder.or_with(lambda g: g.and_with("city", "=", "London")
                              .or_with("city", "=", "Toronto"))

        nodes                                   parameters
        ┌──────────────────────────────────┐    ┌──────────┐
        │ Predicate(AND, name, =, Alex)    │    │ Alex     │
        │ Group(OR, [                      │    │ London   │
        │   Predicate(AND, city, =, London)│    │ Toronto  │
        │   Predicate(OR, city, =, Toronto)│    └──────────┘
        │ ])                               │
        └──────────────────────────────────┘

        render(ANSIDialect()) →
            "name" = ? OR ("city" = ? OR "city" = ?)

    The join of the first node at any level is recorded but never
    rendered, so a builder that starts with ``or_with`` still renders
    without a leading ``OR``.

Examples:
    >>> from recordspine.dialect import ANSIDialect
    >>> b = ConditionBuilder()
    >>> b.and_with("age", ">", 18).or_with(
    ...     lambda g: g.and_with("city", "=", "London").and_with("active", "=", True)
    ... )
    ConditionBuilder(nodes=2, parameters=3)
    >>> b.render(ANSIDialect())
    '"age" > ? OR ("city" = ? AND "active" = ?)'
    >>> b.parameters()
    [18, 'London', True]

Tags:
    sql, conditions, where, having, builder, record-spine
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from recordspine.dialect import Dialect
from recordspine.errors import DialectRequiredError, QueryError


class Join(str, Enum):
    """Logical connective placed before a node when it follows a sibling."""

    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class Predicate:
    """A single ``field operator value`` comparison."""

    join: Join
    field: str
    operator: str
    value: Any

    def as_dict(self) -> dict[str, Any]:
        return {
            "join": self.join.value,
            "field": self.field,
            "operator": self.operator,
            "value": self.value,
        }


@dataclass(frozen=True)
class Group:
    """A parenthesised, independently joined collection of nodes."""

    join: Join
    children: tuple[ConditionNode, ...]

    def as_dict(self) -> dict[str, Any]:
        return {
            "join": self.join.value,
            "sub": [child.as_dict() for child in self.children],
        }


ConditionNode = Union[Predicate, Group]

GroupCallback = Callable[["ConditionBuilder"], Any]


def _coerce_join(join: Join | str) -> Join:
    if isinstance(join, Join):
        return join
    try:
        return Join(str(join).upper())
    except ValueError:
        raise QueryError(
            f"Unknown condition join {join!r}; expected AND or OR",
            context={"join": join},
        ) from None


def render_nodes(nodes: tuple[ConditionNode, ...] | list[ConditionNode], dialect: Dialect) -> str:
    """Render a node sequence depth-first, dropping the first node's join."""
    parts: list[str] = []
    for index, node in enumerate(nodes):
        if index:
            parts.append(f" {node.join.value} ")
        if isinstance(node, Group):
            parts.append(f"({render_nodes(node.children, dialect)})")
        else:
            parts.append(f"{dialect.quote_identifier(node.field)} {node.operator} ?")
    return "".join(parts)


class ConditionBuilder:
    """Builds up a set of conditions for a WHERE or HAVING block."""

    def __init__(self) -> None:
        self._nodes: list[ConditionNode] = []
        self._params: list[Any] = []

    # -- Building ----------------------------------------------------------

    def and_with(
        self,
        field: str | GroupCallback,
        operator: str | None = None,
        value: Any = None,
    ) -> ConditionBuilder:
        """Add a condition joined with ``AND``.

        ``field`` is either a column name, or a callable that receives a
        fresh builder and fills in a parenthesised group.
        """
        return self.add_condition(Join.AND, field, operator, value)

    def or_with(
        self,
        field: str | GroupCallback,
        operator: str | None = None,
        value: Any = None,
    ) -> ConditionBuilder:
        """Add a condition joined with ``OR``."""
        return self.add_condition(Join.OR, field, operator, value)

    def add_condition(
        self,
        join: Join | str,
        field: str | GroupCallback,
        operator: str | None = None,
        value: Any = None,
    ) -> ConditionBuilder:
        join = _coerce_join(join)

        if callable(field):
            child = ConditionBuilder()
            field(child)
            if not child.has_conditions():
                # "()" is not valid SQL; an empty group contributes nothing
                return self
            self._nodes.append(Group(join=join, children=tuple(child._nodes)))
            self._params.extend(child._params)
            return self

        if not isinstance(field, str) or not field:
            raise QueryError(
                f"Condition field must be a non-empty string or a callable, got {field!r}"
            )
        if not operator:
            raise QueryError(
                f"Condition on {field!r} is missing an operator",
                context={"field": field},
            )

        self._nodes.append(Predicate(join=join, field=field, operator=operator, value=value))
        self._params.append(value)
        return self

    # -- Introspection -----------------------------------------------------

    def conditions(self) -> tuple[ConditionNode, ...]:
        """Return the nodes added so far."""
        return tuple(self._nodes)

    def parameters(self) -> list[Any]:
        """Bound values, in rendered placeholder order."""
        return list(self._params)

    def has_conditions(self) -> bool:
        return bool(self._nodes)

    # -- Rendering ---------------------------------------------------------

    def render(self, dialect: Dialect | None) -> str:
        """Render the conditions as a boolean expression (no keyword).

        Returns ``''`` for an empty builder.

        Raises:
            DialectRequiredError: If ``dialect`` is ``None``.
        """
        if dialect is None:
            raise DialectRequiredError()
        return render_nodes(self._nodes, dialect)

    def reset(self) -> ConditionBuilder:
        self._nodes = []
        self._params = []
        return self

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"ConditionBuilder(nodes={len(self._nodes)}, parameters={len(self._params)})"


__all__ = [
    "Join",
    "Predicate",
    "Group",
    "ConditionNode",
    "ConditionBuilder",
    "render_nodes",
]
