"""Per-model-type metadata: table, primary key, connection and fields.

A ``Meta`` is built exactly once per model type by
:meth:`~recordspine.activerecord.model.Model.factory`, which hands it to
the type's ``init()`` and then freezes it.  Every instance of the type
shares the frozen ``Meta``.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from recordspine.activerecord.fields import Field
from recordspine.adapters import get_connection
from recordspine.errors import ModelError
from recordspine.protocols import Connection


class Meta:
    """Metadata for one model type.

    Configured fluently inside ``Model.init()``::

        return meta.table("users").field("name", Text(rules=["required"]))
    """

    def __init__(self, model_type: type) -> None:
        self.model_type = model_type
        self._table: str | None = None
        self._primary_key = "id"
        self._connection: str | Connection = "default"
        self._fields: dict[str, Field] = {}
        self._frozen = False

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ModelError(
                f"Meta for {self.model_type.__name__} is frozen; configure it in init()"
            )

    def freeze(self) -> Meta:
        if self._table is None:
            raise ModelError(
                f"{self.model_type.__name__}.init() did not set a table",
                context={"model": self.model_type.__name__},
            )
        self._fields = MappingProxyType(dict(self._fields))  # type: ignore[assignment]
        self._frozen = True
        return self

    # -- Configuration -----------------------------------------------------

    def table(self, name: str) -> Meta:
        self._check_mutable()
        self._table = name
        return self

    def primary_key(self, name: str) -> Meta:
        self._check_mutable()
        self._primary_key = name
        return self

    def connection(self, connection: str | Connection) -> Meta:
        """Use a registered connection name, or a connection object directly."""
        self._check_mutable()
        self._connection = connection
        return self

    def field(self, name: str, field: Field) -> Meta:
        self._check_mutable()
        self._fields[name] = field
        return self

    # -- Accessors ---------------------------------------------------------

    def get_table(self) -> str:
        return self._table  # type: ignore[return-value]

    def get_primary_key(self) -> str:
        return self._primary_key

    def get_field(self, name: str) -> Field | None:
        return self._fields.get(name)

    def fields(self) -> Mapping[str, Field]:
        return self._fields

    def connection_instance(self) -> Connection:
        """Resolve the configured connection (looked up on every call)."""
        if isinstance(self._connection, str):
            return get_connection(self._connection)
        return self._connection

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def __repr__(self) -> str:
        return (
            f"Meta({self.model_type.__name__}, table={self._table!r}, "
            f"primary_key={self._primary_key!r}, fields={list(self._fields)!r})"
        )


__all__ = ["Meta"]
