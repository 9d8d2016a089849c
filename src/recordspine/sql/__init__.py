"""SQL building blocks: condition trees, clause mixins and query variants."""

from recordspine.sql.conditions import ConditionBuilder, ConditionNode, Group, Join, Predicate
from recordspine.sql.expression import Expression
from recordspine.sql.query import Delete, Insert, JoinSpec, JoinType, Query, Select, SortDirection, Update

__all__ = [
    "ConditionBuilder",
    "ConditionNode",
    "Group",
    "Join",
    "Predicate",
    "Expression",
    "Query",
    "Select",
    "Insert",
    "Update",
    "Delete",
    "JoinSpec",
    "JoinType",
    "SortDirection",
]
