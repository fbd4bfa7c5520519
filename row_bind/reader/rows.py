"""Entities presented as a row cursor for bulk writes."""

from __future__ import annotations

import datetime
import uuid
from collections.abc import Iterable, Iterator
from decimal import Decimal
from typing import Any, Generic, TypeVar

from row_bind.core.exceptions import ExecutionError, FieldNotFoundError
from row_bind.mapping.converter import Char, is_null, to_type
from row_bind.mapping.property import PropertyMapper

T = TypeVar("T")

_NO_ROW = object()


class EntityRowAdapter(Generic[T]):
    """Cursor-shaped view of a collection of entities.

    Fields come from the mapper's bindings that are not ignored, or are
    ignored on load only. Each value passes through the binding's
    ``to_db`` converter when one is set.

    Satisfies ``RowCursor``, and iterating it yields one value tuple per
    entity, ready for DB-API ``executemany``.

    Args:
        entities: Entities to expose, consumed lazily.
        mapper: Property mapper for the entity type.
    """

    def __init__(self, entities: Iterable[T], mapper: PropertyMapper[T]) -> None:
        self._mapper = mapper
        self._bindings = mapper.save_bindings
        self._names = [b.field for b in self._bindings]
        self._ordinals: dict[str, int] = {}
        for ordinal, name in enumerate(self._names):
            self._ordinals.setdefault(name.lower(), ordinal)
        self._entities = iter(entities)
        self._current: Any = _NO_ROW
        self._closed = False

    @property
    def field_count(self) -> int:
        return len(self._names)

    @property
    def field_names(self) -> list[str]:
        return list(self._names)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def get_name(self, ordinal: int) -> str:
        return self._names[ordinal]

    def get_ordinal(self, name: str) -> int:
        try:
            return self._ordinals[name.lower()]
        except KeyError:
            raise FieldNotFoundError(name) from None

    def read(self) -> bool:
        if self._closed:
            return False
        try:
            self._current = next(self._entities)
        except StopIteration:
            self.close()
            return False
        return True

    def close(self) -> None:
        self._closed = True
        self._current = _NO_ROW

    def get_value(self, ordinal: int) -> Any:
        if self._current is _NO_ROW:
            raise ExecutionError("No current row; call read() first")
        binding = self._bindings[ordinal]
        value = getattr(self._current, binding.prop.name)
        if binding.to_db is not None:
            value = binding.to_db(value)
        return value

    def get_values(self) -> tuple[Any, ...]:
        return tuple(self.get_value(i) for i in range(len(self._bindings)))

    def __getitem__(self, key: int | str) -> Any:
        if isinstance(key, str):
            key = self.get_ordinal(key)
        return self.get_value(key)

    def is_null(self, key: int | str) -> bool:
        return is_null(self[key])

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        while self.read():
            yield self.get_values()

    def __enter__(self) -> EntityRowAdapter[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    # --- Typed access ---

    def get_bool(self, key: int | str) -> bool:
        return to_type(self[key], bool)  # type: ignore[no-any-return]

    def get_int(self, key: int | str) -> int:
        return to_type(self[key], int)  # type: ignore[no-any-return]

    def get_float(self, key: int | str) -> float:
        return to_type(self[key], float)  # type: ignore[no-any-return]

    def get_decimal(self, key: int | str) -> Decimal:
        return to_type(self[key], Decimal)  # type: ignore[no-any-return]

    def get_str(self, key: int | str) -> str | None:
        return to_type(self[key], str)  # type: ignore[no-any-return]

    def get_bytes(self, key: int | str) -> bytes | None:
        return to_type(self[key], bytes)  # type: ignore[no-any-return]

    def get_datetime(self, key: int | str) -> datetime.datetime:
        return to_type(self[key], datetime.datetime)  # type: ignore[no-any-return]

    def get_date(self, key: int | str) -> datetime.date:
        return to_type(self[key], datetime.date)  # type: ignore[no-any-return]

    def get_time(self, key: int | str) -> datetime.time:
        return to_type(self[key], datetime.time)  # type: ignore[no-any-return]

    def get_uuid(self, key: int | str) -> uuid.UUID:
        return to_type(self[key], uuid.UUID)  # type: ignore[no-any-return]

    def get_char(self, key: int | str) -> str:
        return to_type(self[key], Char)  # type: ignore[no-any-return]
