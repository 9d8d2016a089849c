"""SELECT bound to a model type.

``Model.query()`` returns a :class:`ModelSelect`: an ordinary
:class:`~recordspine.sql.query.Select` that also knows which model type
to hydrate, so a chain can end in ``fetch()``, ``fetch_all()`` or
``count()``::

    adults = User.query().where("age", ">=", 18).order_by("name").fetch_all()
    first = User.query().where("email", "=", email).fetch()
    total = User.query().where("active", "=", 1).count()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from recordspine.dialect import Dialect
from recordspine.sql.query import Select

if TYPE_CHECKING:
    from recordspine.activerecord.model import Model
    from recordspine.activerecord.resultset import Resultset


class ModelSelect(Select):
    """A Select whose rows become instances of ``model_type``."""

    def __init__(self, model_type: type[Model], dialect: Dialect | None = None) -> None:
        self.model_type = model_type
        super().__init__(dialect)

    def fetch(self) -> Model:
        """First matching instance; an unloaded instance when nothing matches."""
        self.flag("fetch", "one")
        if self.get_limit() is None:
            self.limit(1)
        return self.model_type.fetch_query(self)  # type: ignore[return-value]

    def fetch_all(self) -> Resultset[Any]:
        self.flag("fetch", "all")
        return self.model_type.fetch_query(self)  # type: ignore[return-value]

    def count(self) -> int:
        """Number of matching rows (the column list and pagination are replaced)."""
        return self.model_type.fetch_count(self)

    def __repr__(self) -> str:
        return f"ModelSelect({self.model_type.__name__}, {self.sql()!r}, params={self.params()!r})"


__all__ = ["ModelSelect"]
