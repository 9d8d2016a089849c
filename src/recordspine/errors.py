"""
Structured error types for record-spine.

Every error raised by the builder and model layers extends
:class:`RecordSpineError`, which carries a category and a free-form context
mapping so that callers can log and route failures without parsing messages.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                     RecordSpineError                             │
        │                  (category, context, cause)                      │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  QueryError          DialectRequiredError   ValidationError     │
        │  (QUERY)             (RENDER)               (VALIDATION)        │
        │                                                                  │
        │  ModelError          ConnectionNotFoundError                    │
        │  (CONFIG)            (CONFIG)                                   │
        └─────────────────────────────────────────────────────────────────┘

    Construction errors (``QueryError``) are raised by the call that
    introduced the bad state.  ``DialectRequiredError`` separates "cannot
    render" from "nothing to render" (an empty clause is a valid ``''``).
    Failures raised by a connection are never wrapped: they propagate to
    the caller unmodified.

Examples:
    >>> err = QueryError("Unknown join type 'OUTER'").with_context(table="users")
    >>> err.to_dict()["category"]
    'QUERY'

Tags:
    error-handling, exception-hierarchy, record-spine
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    QUERY = "QUERY"               # Bad builder input
    RENDER = "RENDER"             # Rendering contract violated
    VALIDATION = "VALIDATION"     # Model data failed its rules
    CONFIG = "CONFIG"             # Model type or registry misconfigured
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


class RecordSpineError(Exception):
    """
    Base exception for all record-spine errors.

    Subclasses set ``default_category``; the context mapping collects any
    metadata worth logging (table, field, join type...).
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RecordSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryError("Bad direction").with_context(field="name")
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# BUILDER ERRORS
# =============================================================================


class QueryError(RecordSpineError):
    """Invalid query construction (unknown join type, bad direction, etc.)."""

    default_category = ErrorCategory.QUERY


class DialectRequiredError(RecordSpineError):
    """Rendering was requested without a dialect to quote identifiers."""

    default_category = ErrorCategory.RENDER

    def __init__(self, message: str = "A dialect is required to render SQL", **kwargs: Any):
        super().__init__(message, **kwargs)


# =============================================================================
# MODEL ERRORS
# =============================================================================


class ModelError(RecordSpineError):
    """Model type misconfiguration."""

    default_category = ErrorCategory.CONFIG


class ConnectionNotFoundError(ModelError):
    """Named connection has not been registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Connection not registered: {name}", context={"connection": name})


class ValidationError(RecordSpineError):
    """
    Model data failed validation.

    Carries every failure, grouped by field, rather than just the first::

        {"name": ["Name is required"], "age": ["Age must be at least 18"]}
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        messages: dict[str, list[str]],
        message: str | None = None,
        **kwargs: Any,
    ):
        self.messages = {field: list(msgs) for field, msgs in messages.items()}
        if message is None:
            count = sum(len(m) for m in self.messages.values())
            message = f"Validation failed with {count} error(s) on {sorted(self.messages)}"
        super().__init__(message, **kwargs)

    @property
    def fields(self) -> list[str]:
        """Names of the fields that failed, in failure order."""
        return list(self.messages)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["messages"] = {field: list(msgs) for field, msgs in self.messages.items()}
        return result


__all__ = [
    "ErrorCategory",
    "RecordSpineError",
    "QueryError",
    "DialectRequiredError",
    "ModelError",
    "ConnectionNotFoundError",
    "ValidationError",
]
