"""Lazy collection of model instances built from raw rows."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar, overload

if TYPE_CHECKING:
    from recordspine.activerecord.model import Model

M = TypeVar("M", bound="Model")


class Resultset(Generic[M]):
    """Rows from a SELECT, hydrated into ``model_type`` instances on access.

    Each row becomes a loaded instance (``set_raw`` + ``set_as_saved``) the
    first time it is read; the instance is cached, so repeated access
    returns the same object.
    """

    def __init__(self, rows: Sequence[Mapping[str, Any]], model_type: type[M]) -> None:
        self._rows = list(rows)
        self._model_type = model_type
        self._hydrated: dict[int, M] = {}

    def _hydrate(self, index: int) -> M:
        instance = self._hydrated.get(index)
        if instance is None:
            instance = self._model_type.factory()
            instance.set_raw(self._rows[index]).set_as_saved()
            self._hydrated[index] = instance
        return instance

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[M]:
        for index in range(len(self._rows)):
            yield self._hydrate(index)

    @overload
    def __getitem__(self, index: int) -> M: ...

    @overload
    def __getitem__(self, index: slice) -> list[M]: ...

    def __getitem__(self, index: int | slice) -> M | list[M]:
        if isinstance(index, slice):
            return [self._hydrate(i) for i in range(len(self._rows))[index]]
        if index < 0:
            index += len(self._rows)
        if not 0 <= index < len(self._rows):
            raise IndexError("Resultset index out of range")
        return self._hydrate(index)

    def first(self) -> M | None:
        return self._hydrate(0) if self._rows else None

    def to_list(self) -> list[M]:
        return list(self)

    def raw_rows(self) -> list[Mapping[str, Any]]:
        return list(self._rows)

    @property
    def model_type(self) -> type[M]:
        return self._model_type

    def __repr__(self) -> str:
        return f"Resultset({self._model_type.__name__}, rows={len(self._rows)}, hydrated={len(self._hydrated)})"


__all__ = ["Resultset"]
