"""Rule-based validation of model data, evaluated through pydantic.

Rules are registered by name and referenced from fields as
``(rule_name, *args)`` tuples.  A :class:`Validator` collects
``(rule, field, args)`` triples and evaluates them all in one pass by
building a throwaway pydantic model with :func:`pydantic.create_model`:
each field gets an ``AfterValidator`` that runs every rule attached to it,
and the full input travels in the validation context so that cross-field
rules (``equals``, ``different``) can see their sibling values.

Every failing rule contributes a message; nothing stops at the first
failure::

    v = Validator({"name": "", "age": 12})
    v.rule("required", "name").rule("min", "age", 18)
    v.validate()   # False
    v.errors()     # {"name": ["Name is required"],
                   #  "age": ["Age must be at least 18"]}

Custom rules use the same callback shape as the built-ins,
``check(field, value, params, fields) -> bool``::

    register_rule("even", lambda f, v, p, d: v % 2 == 0, "{field} must be even")
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Annotated, Any
from urllib.parse import urlparse

from pydantic import AfterValidator, ConfigDict, Field, ValidationInfo, create_model
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

RuleCheck = Callable[[str, Any, Sequence[Any], Mapping[str, Any]], bool]


@dataclass(frozen=True)
class RuleDefinition:
    """A named rule.

    ``message`` is a ``str.format`` template receiving ``field`` (a
    human-readable label) and the positional rule parameters.
    ``checks_empty`` rules also run when the value is missing or blank.
    """

    name: str
    check: RuleCheck
    message: str
    checks_empty: bool = False

    def format_message(self, field: str, params: Sequence[Any]) -> str:
        label = field.replace("_", " ").capitalize()
        return self.message.format(*params, field=label)


_RULES: dict[str, RuleDefinition] = {}


def register_rule(
    name: str,
    check: RuleCheck,
    message: str = "{field} is invalid",
    *,
    checks_empty: bool = False,
) -> None:
    """Register (or replace) a named rule."""
    _RULES[name] = RuleDefinition(name=name, check=check, message=message, checks_empty=checks_empty)


def get_rule(name: str) -> RuleDefinition:
    try:
        return _RULES[name]
    except KeyError:
        raise ValueError(f"Unknown validation rule '{name}'. Registered: {sorted(_RULES)}") from None


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


# =========================================================================
# Built-in rules
# =========================================================================


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value))
    except ValueError:
        return None


def _length(value: Any) -> int:
    return len(value) if isinstance(value, (str, list, tuple)) else len(str(value))


_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_INTEGER = re.compile(r"^[+-]?\d+$")
_SLUG = re.compile(r"^[-a-z0-9_]+$", re.IGNORECASE)


def _url(value: Any) -> bool:
    parsed = urlparse(str(value))
    return bool(parsed.scheme and parsed.netloc)


register_rule("required", lambda f, v, p, d: not is_empty(v), "{field} is required", checks_empty=True)
register_rule("equals", lambda f, v, p, d: v == d.get(p[0]), "{field} must be the same as '{0}'")
register_rule("match", lambda f, v, p, d: v == d.get(p[0]), "{field} must be the same as '{0}'")
register_rule("different", lambda f, v, p, d: v != d.get(p[0]), "{field} must be different than '{0}'")
register_rule("accepted", lambda f, v, p, d: v in ("yes", "on", 1, "1", True), "{field} must be accepted", checks_empty=True)
register_rule("numeric", lambda f, v, p, d: _as_number(v) is not None, "{field} must be numeric")
register_rule(
    "integer",
    lambda f, v, p, d: (isinstance(v, int) and not isinstance(v, bool)) or bool(_INTEGER.match(str(v))),
    "{field} must be an integer",
)
register_rule(
    "boolean", lambda f, v, p, d: v in (True, False, 0, 1, "0", "1"), "{field} must be a boolean"
)
register_rule("length", lambda f, v, p, d: _length(v) == p[0], "{field} must be {0} characters long")
register_rule(
    "lengthBetween",
    lambda f, v, p, d: p[0] <= _length(v) <= p[1],
    "{field} must be between {0} and {1} characters",
)
register_rule(
    "lengthMin", lambda f, v, p, d: _length(v) >= p[0], "{field} must be at least {0} characters long"
)
register_rule(
    "lengthMax", lambda f, v, p, d: _length(v) <= p[0], "{field} must not exceed {0} characters"
)
register_rule(
    "min",
    lambda f, v, p, d: (n := _as_number(v)) is not None and n >= p[0],
    "{field} must be at least {0}",
)
register_rule(
    "max",
    lambda f, v, p, d: (n := _as_number(v)) is not None and n <= p[0],
    "{field} must be no more than {0}",
)
register_rule("in", lambda f, v, p, d: v in p[0], "{field} contains invalid value")
register_rule("notIn", lambda f, v, p, d: v not in p[0], "{field} contains invalid value")
register_rule("email", lambda f, v, p, d: bool(_EMAIL.match(str(v))), "{field} is not a valid email address")
register_rule("url", lambda f, v, p, d: _url(v), "{field} is not a valid URL")
register_rule("regex", lambda f, v, p, d: re.search(p[0], str(v)) is not None, "{field} contains invalid characters")
register_rule("alpha", lambda f, v, p, d: str(v).isalpha(), "{field} must contain only letters a-z")
register_rule("alphaNum", lambda f, v, p, d: str(v).isalnum(), "{field} must contain only letters a-z and/or numbers 0-9")
register_rule("slug", lambda f, v, p, d: bool(_SLUG.match(str(v))), "{field} must contain only letters, numbers, dashes and underscores")
register_rule("contains", lambda f, v, p, d: str(p[0]) in str(v), "{field} must contain {0}")


# =========================================================================
# Validator
# =========================================================================


def _field_checker(field: str, rules: list[tuple[RuleDefinition, tuple[Any, ...]]]) -> Callable[..., Any]:
    def check(value: Any, info: ValidationInfo) -> Any:
        data = (info.context or {}).get("data", {})
        failures = []
        for definition, params in rules:
            if is_empty(value) and not definition.checks_empty:
                continue
            if not definition.check(field, value, params, data):
                failures.append(definition.format_message(field, params))
        if failures:
            raise PydanticCustomError("rule_failed", "{messages}", {"messages": failures})
        return value

    return check


class Validator:
    """Evaluates a set of rules against one input mapping."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        self.data = dict(data)
        self._rules: dict[str, list[tuple[RuleDefinition, tuple[Any, ...]]]] = {}
        self._errors: dict[str, list[str]] = {}

    def rule(self, rule: str | RuleCheck, field: str, *params: Any) -> Validator:
        """Attach ``rule`` (a registered name or a check callable) to ``field``."""
        if callable(rule):
            definition = RuleDefinition(name=getattr(rule, "__name__", "custom"), check=rule, message="{field} is invalid")
        else:
            definition = get_rule(rule)
        self._rules.setdefault(field, []).append((definition, tuple(params)))
        return self

    def rules(self) -> dict[str, list[tuple[str, tuple[Any, ...]]]]:
        return {field: [(d.name, p) for d, p in rules] for field, rules in self._rules.items()}

    def _build_model(self) -> tuple[type, dict[str, str]]:
        definitions: dict[str, Any] = {}
        names: dict[str, str] = {}
        for index, (field, rules) in enumerate(self._rules.items()):
            attr = f"f{index}"
            names[attr] = field
            definitions[attr] = (
                Annotated[Any, AfterValidator(_field_checker(field, rules))],
                Field(default=None, alias=field, validate_default=True),
            )
        model = create_model(
            "RecordValidation",
            __config__=ConfigDict(extra="ignore", populate_by_name=False),
            **definitions,
        )
        return model, names

    def validate(self) -> bool:
        """Run every rule; returns ``True`` when all pass.

        Errors from the previous run are discarded first.
        """
        self._errors = {}
        if not self._rules:
            return True

        model, names = self._build_model()
        try:
            model.model_validate(self.data, context={"data": self.data})
        except PydanticValidationError as exc:
            for error in exc.errors():
                loc = str(error["loc"][0]) if error["loc"] else ""
                field = names.get(loc, loc)
                messages = (error.get("ctx") or {}).get("messages") or [error["msg"]]
                self._errors.setdefault(field, []).extend(messages)
        return not self._errors

    def errors(self) -> dict[str, list[str]]:
        return {field: list(messages) for field, messages in self._errors.items()}


__all__ = [
    "RuleDefinition",
    "Validator",
    "register_rule",
    "get_rule",
    "is_empty",
]
