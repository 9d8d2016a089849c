"""Active-Record base model.

Manifesto:
    A model instance is two maps and a lookup rule.  ``original`` holds what
    the database is known to contain; ``changed`` holds what the caller has
    set since.  Reads prefer ``changed``; saves send only ``changed``; a
    successful save folds ``changed`` into ``original``.  Nothing else is
    stateful, and state only moves forward once the connection has
    returned without raising.

Architecture::

              set() / set_raw()
        ┌───────────────────────────┐
        │                           ▼
    ┌───────┐   save() (create)  ┌────────┐   save() (update)  ┌────────┐
    │  New  │ ─────────────────▶ │ Loaded │ ◀───────────────── │ Dirty  │
    │orig={}│                    │chg={}  │ ─────────────────▶ │chg≠{}  │
    └───────┘                    └────────┘      set()         └────────┘

    save():   primary key in original?  yes → UPDATE ... WHERE pk = ?
                                        no  → INSERT, then original[pk] = id
    delete(): only when loaded (primary key required); otherwise a no-op

Usage:
    >>> class User(Model):
    ...     @classmethod
    ...     def init(cls, meta):
    ...         return meta.table("users").field("name", Text(rules=["required"]))
    >>> user = User.factory()
    >>> user.set("name", "Alex").get("name")
    'Alex'
    >>> user.original("name") is None
    True
    >>> user.set_as_saved().original("name")
    'Alex'

Tags:
    active-record, model, persistence, dirty-tracking, record-spine
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar, TypeVar

from recordspine.activerecord.meta import Meta
from recordspine.activerecord.query import ModelSelect
from recordspine.activerecord.resultset import Resultset
from recordspine.activerecord.validation import Validator
from recordspine.errors import DialectRequiredError, ModelError, ValidationError
from recordspine.logging import get_logger
from recordspine.sql.expression import Expression
from recordspine.sql.query import Delete, Insert, Select, Update

logger = get_logger(__name__)

M = TypeVar("M", bound="Model")


class Model:
    """Base model class: represents instances and runs their queries.

    Subclasses must define :meth:`init` and should be created through
    :meth:`factory`.
    """

    # Per-type Meta cache, keyed by model type (not inherited by subclasses)
    _meta_cache: ClassVar[dict[type, Meta]] = {}

    def __init__(self, meta: Meta) -> None:
        self._meta = meta
        self._original: dict[str, Any] = {}
        self._changed: dict[str, Any] = {}

    # =====================================================================
    # Type-level setup
    # =====================================================================

    @classmethod
    def init(cls, meta: Meta) -> Meta:
        """Configure table, primary key, connection and fields on ``meta``."""
        raise ModelError(
            f"You must define init() in your model ({cls.__name__})",
            context={"model": cls.__name__},
        )

    @classmethod
    def build_meta(cls) -> Meta:
        """Return the frozen Meta for this type, building it on first use."""
        meta = Model._meta_cache.get(cls)
        if meta is None:
            meta = cls.init(Meta(cls))
            if not isinstance(meta, Meta):
                raise ModelError(f"{cls.__name__}.init() must return its Meta")
            meta.freeze()
            Model._meta_cache[cls] = meta
        return meta

    @classmethod
    def factory(cls: type[M]) -> M:
        """Create a new, empty instance of this model type."""
        return cls(cls.build_meta())

    def meta(self) -> Meta:
        return self._meta

    # =====================================================================
    # Values
    # =====================================================================

    def set(self: M, key: str | Mapping[str, Any], value: Any = None) -> M:
        """Set one value, or several from a mapping, running ``on_set`` hooks.

        The model is marked as changed.
        """
        items = key.items() if isinstance(key, Mapping) else [(key, value)]
        for k, v in items:
            field = self._meta.get_field(k)
            if field is not None:
                v = field.on_set(self, k, v)
            self._changed[k] = v
        return self

    def set_raw(self: M, data: Mapping[str, Any]) -> M:
        """Set values without running ``on_set`` hooks."""
        for k, v in data.items():
            self._changed[k] = v
        return self

    def get(self, key: str, default: Any = None) -> Any:
        """Newest value for ``key`` (pending change first, then original).

        The field's ``on_get`` hook is applied to whichever value is chosen.
        """
        if key in self._changed:
            value = self._changed[key]
        elif key in self._original:
            value = self._original[key]
        else:
            value = default

        field = self._meta.get_field(key)
        if field is not None:
            value = field.on_get(self, key, value)
        return value

    def original(self, key: str) -> Any:
        """Persisted value of ``key``, ignoring pending changes.

        Note that :meth:`set_as_saved` overwrites originals with the
        changes; this is not a changelog.
        """
        value = self._original.get(key)
        if value is not None:
            field = self._meta.get_field(key)
            if field is not None:
                value = field.on_get(self, key, value)
        return value

    def is_value_set(self, key: str) -> bool:
        return key in self._changed or key in self._original

    def changes(self) -> dict[str, Any]:
        return dict(self._changed)

    def has_changes(self) -> bool:
        return bool(self._changed)

    def set_as_saved(self: M) -> M:
        """Fold pending changes into the originals and clear them."""
        self._original.update(self._changed)
        self._changed = {}
        return self

    def is_loaded(self) -> bool:
        """Whether this instance was loaded from (or saved to) the database."""
        return bool(self._original)

    def to_dict(self) -> dict[str, Any]:
        """Current view of every known field, with ``on_get`` applied."""
        keys = list(dict.fromkeys([*self._original, *self._changed]))
        return {k: self.get(k) for k in keys}

    # =====================================================================
    # Saving / Updating
    # =====================================================================

    def save(self: M) -> M:
        """Update when loaded from the database (primary key known), else create."""
        if self._meta.get_primary_key() in self._original:
            return self._do_update()
        return self._do_create()

    def _prepare_for_save(self, data: Mapping[str, Any]) -> dict[str, Any]:
        prepared = {}
        for key, value in data.items():
            field = self._meta.get_field(key)
            prepared[key] = field.on_save(self, key, value) if field is not None else value
        return prepared

    def _do_create(self: M) -> M:
        if not self._changed:
            raise ModelError(
                f"Cannot create an empty {type(self).__name__}; set some values first",
                context={"model": type(self).__name__},
            )

        pk = self._meta.get_primary_key()
        explicit_pk = self._changed.get(pk)
        query = Insert().table(self._meta.get_table()).values(self._prepare_for_save(self._changed))

        new_id = query.execute(self._meta.connection_instance())

        self.set_as_saved()
        if explicit_pk is None:
            self._original[pk] = new_id
        logger.debug("model.created", model=type(self).__name__, table=self._meta.get_table(), pk=self._original[pk])
        return self

    def _do_update(self: M) -> M:
        if not self._changed:
            return self

        pk = self._meta.get_primary_key()
        query = (
            Update()
            .table(self._meta.get_table())
            .values(self._prepare_for_save(self._changed))
            .where(pk, "=", self._original[pk])
        )

        query.execute(self._meta.connection_instance())

        fields = list(self._changed)
        self.set_as_saved()
        logger.debug("model.updated", model=type(self).__name__, table=self._meta.get_table(), pk=self._original[pk], fields=fields)
        return self

    # =====================================================================
    # Validation
    # =====================================================================

    def validate(self, extra: Mapping[str, list[Any]] | None = None) -> bool:
        """Validate the merged original + changed data.

        Declared field rules run together with ``extra`` one-shot rules in
        the form ``{field: [(rule, *params), ...]}``::

            user.validate({"password": [("equals", "password_repeat"), ("lengthMin", 8)]})

        Raises:
            ValidationError: carrying every failure, grouped by field.
        """
        data = self._prepare_for_save({**self._original, **self._changed})

        validator = type(self).validator_hook(Validator(data))

        for name, field in self._meta.fields().items():
            for rule in field.rules():
                validator.rule(rule[0], name, *rule[1:])

        for name, rules in (extra or {}).items():
            for rule in rules:
                rule = (rule,) if isinstance(rule, str) or callable(rule) else tuple(rule)
                validator.rule(rule[0], name, *rule[1:])

        if not validator.validate():
            raise ValidationError(validator.errors(), context={"model": type(self).__name__})
        return True

    @classmethod
    def validator_hook(cls, validator: Validator) -> Validator:
        """Override to add custom rules to every validation run."""
        return validator

    # =====================================================================
    # Read / Delete
    # =====================================================================

    @classmethod
    def find_by_id(cls: type[M], id: Any) -> M:
        """Load one instance by primary key; an unloaded instance when missing."""
        meta = cls.build_meta()
        return cls.query().where(meta.get_primary_key(), "=", id).limit(1).fetch()

    def delete(self: M) -> M:
        """Delete this row.  A no-op for instances that were never loaded.

        Raises:
            ModelError: If the instance is loaded but its primary key is unknown.
        """
        if self.is_loaded():
            pk = self._meta.get_primary_key()
            if pk not in self._original:
                raise ModelError(
                    f"Cannot delete {type(self).__name__}: primary key '{pk}' was never loaded",
                    context={"model": type(self).__name__, "primary_key": pk},
                )
            query = Delete().table(self._meta.get_table()).where(pk, "=", self._original[pk])
            query.execute(self._meta.connection_instance())
            logger.debug("model.deleted", model=type(self).__name__, table=self._meta.get_table(), pk=self._original[pk])
        return self

    # =====================================================================
    # Querying
    # =====================================================================

    @classmethod
    def query(cls) -> ModelSelect:
        """A SELECT against this model's table with ``*`` already selected."""
        meta = cls.build_meta()
        return ModelSelect(cls).select("*").from_(meta.get_table()).flag("model", cls)

    @classmethod
    def fetch_query(cls: type[M], select: Select) -> M | Resultset[M]:
        """Run a prepared SELECT as-is.

        Returns a single (possibly unloaded) instance when the select is
        flagged ``fetch='one'``, otherwise a lazy :class:`Resultset`.
        """
        conn = cls.build_meta().connection_instance()
        rows = select.fetch_rows(conn)

        if select.get_flag("fetch") == "one":
            instance = cls.factory()
            if rows:
                instance.set_raw(rows[0]).set_as_saved()
            return instance

        return Resultset(rows, cls)

    @classmethod
    def fetch_count(cls, select: Select) -> int:
        """Count the rows ``select`` matches.

        Replaces the column list with ``COUNT(<pk>)`` and drops ordering and
        pagination; WHERE, joins and grouping are kept.
        """
        meta = cls.build_meta()
        conn = meta.connection_instance()

        if select.dialect is None:
            raise DialectRequiredError("Cannot count without a dialect")
        pk = select.dialect.quote_identifier(meta.get_primary_key())
        select.reset_select().select(Expression(f"COUNT({pk})"), "aggr")
        select.reset_order_by().reset_limit().reset_offset()

        row = select.fetch_row(conn)
        if not row:
            return 0
        return int(row.get("aggr", 0) or 0)

    def __repr__(self) -> str:
        state = "dirty" if self._changed else ("loaded" if self._original else "new")
        return f"<{type(self).__name__} {state} {self.to_dict()!r}>"


__all__ = ["Model"]
