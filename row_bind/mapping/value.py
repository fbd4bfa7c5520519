"""Single-column and user-function mappers."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from row_bind.core.exceptions import BindingError, FieldCountError
from row_bind.mapping.converter import to_type, type_name
from row_bind.mapping.record import Record

T = TypeVar("T")


class ValueMapper(Generic[T]):
    """Converts the first column of each row to ``value_type``.

    Used for queries whose result type is a scalar, such as
    ``SELECT COUNT(*)`` or a single-column id list.
    """

    def __init__(self, value_type: Any) -> None:
        self._value_type = value_type

    @property
    def entity_type(self) -> Any:
        return self._value_type

    def create_instance(self, record: Record) -> T:
        if len(record) == 0:
            raise FieldCountError(0, 1)
        value = record[0]
        try:
            return to_type(value, self._value_type)  # type: ignore[no-any-return]
        except BindingError as e:
            field = record.get_name(0)
            raise BindingError(
                f"{field}: {e}", field=field, value=value, target_type=self._value_type
            ) from e

    def __repr__(self) -> str:
        return f"ValueMapper({type_name(self._value_type)})"


class FunctionMapper(Generic[T]):
    """Delegates entity creation to a user function taking the ``Record``."""

    def __init__(self, entity_type: Any, creator: Callable[[Record], T]) -> None:
        self._entity_type = entity_type
        self._creator = creator

    @property
    def entity_type(self) -> Any:
        return self._entity_type

    def create_instance(self, record: Record) -> T:
        return self._creator(record)

    def __repr__(self) -> str:
        return f"FunctionMapper({type_name(self._entity_type)})"
