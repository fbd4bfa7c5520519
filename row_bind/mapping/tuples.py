"""Positional mapper for fixed-arity tuples and NamedTuples."""

from __future__ import annotations

import typing
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from row_bind.core.exceptions import BindingError, FieldCountError, MappingError
from row_bind.mapping.converter import ValueConverter, find_value_converter, to_type, type_name
from row_bind.mapping.record import Record

T = TypeVar("T")


def is_named_tuple(cls: Any) -> bool:
    return (
        isinstance(cls, type)
        and typing.get_origin(cls) is None
        and issubclass(cls, tuple)
        and hasattr(cls, "_fields")
    )


def is_tuple_type(target: Any) -> bool:
    """True for ``tuple[...]`` aliases and NamedTuple classes."""
    return typing.get_origin(target) is tuple or is_named_tuple(target)


def _element_types(target: Any) -> tuple[Any, ...]:
    if is_named_tuple(target):
        try:
            hints = typing.get_type_hints(target)
        except (NameError, TypeError):
            hints = {}
        return tuple(hints.get(name, Any) for name in target._fields)
    if typing.get_origin(target) is tuple:
        args = typing.get_args(target)
        if Ellipsis in args:
            raise MappingError(
                f"Variable-length tuple type cannot be mapped: {target!r}"
            )
        return args
    raise MappingError(f"Type is not a tuple type: {type_name(target)}")


class TupleMapper(Generic[T]):
    """Maps column i of each row to element i of a tuple.

    Extra columns are ignored; a row with fewer columns than the tuple
    has elements raises ``FieldCountError``.

    Args:
        entity_type: ``tuple[A, B, ...]`` or a NamedTuple class.
        value_converters: Per-type converter table consulted before the
            standard conversion.
    """

    def __init__(
        self,
        entity_type: Any,
        value_converters: Mapping[Any, ValueConverter[Any]] | None = None,
    ) -> None:
        self._entity_type = entity_type
        self._element_types = _element_types(entity_type)
        if not self._element_types:
            raise MappingError(f"Tuple type must have at least one element: {entity_type!r}")
        self._named = is_named_tuple(entity_type)
        self._value_converters = value_converters if value_converters is not None else {}

    @property
    def entity_type(self) -> Any:
        return self._entity_type

    @property
    def arity(self) -> int:
        return len(self._element_types)

    @property
    def element_types(self) -> tuple[Any, ...]:
        return self._element_types

    def create_instance(self, record: Record) -> T:
        if len(record) < self.arity:
            raise FieldCountError(len(record), self.arity)

        values = []
        for ordinal, target in enumerate(self._element_types):
            value = record[ordinal]
            try:
                converter = find_value_converter(self._value_converters, target)
                if converter is not None:
                    values.append(converter(value))
                else:
                    values.append(to_type(value, target))
            except (BindingError, TypeError, ValueError) as e:
                field = record.get_name(ordinal)
                raise BindingError(
                    f"{field}: {e}", field=field, value=value, target_type=target
                ) from e

        if self._named:
            return self._entity_type(*values)  # type: ignore[no-any-return]
        return tuple(values)  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"TupleMapper({self._entity_type!r})"
