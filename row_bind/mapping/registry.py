"""Mapper registry - one mapper per entity type, owned by a connector.

Value types come pre-registered. Other types are configured explicitly
with ``configure`` or registered with default settings on first ``get``.

The registry is not locked. Finish configuration before querying from
several threads; two threads asking ``get`` for the same unconfigured
type at once may each build a mapper.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Callable
from decimal import Decimal
from typing import Any, Optional, get_origin

from row_bind.core.enums import PopulationCondition
from row_bind.core.exceptions import MappingError
from row_bind.mapping.converter import (
    SCALAR_TYPES,
    Char,
    ValueConverter,
    find_value_converter,
    is_enum_type,
    type_key,
    type_name,
    unwrap_nullable,
)
from row_bind.mapping.property import PropertyMapper, PropertyMapperBuilder
from row_bind.mapping.protocol import Mapper
from row_bind.mapping.record import Record
from row_bind.mapping.tuples import TupleMapper, is_tuple_type
from row_bind.mapping.value import FunctionMapper, ValueMapper

logger = logging.getLogger(__name__)

_SEEDED_TYPES: tuple[Any, ...] = (
    bool,
    int,
    float,
    Decimal,
    datetime.datetime,
    datetime.date,
    datetime.time,
    uuid.UUID,
    Char,
)

# Reference-like: a null already converts to None.
_SEEDED_REFERENCE_TYPES: tuple[Any, ...] = (str, bytes)


def is_value_type(target: Any) -> bool:
    """True for types mapped from a single column rather than by property."""
    base = unwrap_nullable(target)
    if base is Any or get_origin(base) is not None or not isinstance(base, type):
        return True
    return base in SCALAR_TYPES or is_enum_type(base)


class MapperRegistry:
    """Mappers by entity type plus the custom value converter table."""

    def __init__(self) -> None:
        self._mappers: dict[Any, Mapper[Any] | PropertyMapperBuilder[Any]] = {}
        self._value_converters: dict[Any, ValueConverter[Any]] = {}
        for value_type in _SEEDED_TYPES:
            self._mappers[value_type] = ValueMapper(value_type)
            self._mappers[Optional[value_type]] = ValueMapper(Optional[value_type])  # noqa: UP007
        for value_type in _SEEDED_REFERENCE_TYPES:
            self._mappers[value_type] = ValueMapper(value_type)

    def __len__(self) -> int:
        return len(self._mappers)

    def __contains__(self, entity_type: Any) -> bool:
        return self.has_mapper(entity_type)

    @property
    def entity_types(self) -> list[Any]:
        return list(self._mappers.keys())

    def configure(
        self,
        entity_type: Any,
        condition: PopulationCondition = PopulationCondition.OPTIONAL,
        *,
        creator: Callable[[Record], Any] | None = None,
    ) -> Any:
        """Register the mapper for *entity_type*.

        Returns a ``PropertyMapperBuilder`` to configure fluently, or the
        ``FunctionMapper`` when *creator* is given. The builder is built on
        the first ``get`` for the type.

        Raises:
            MappingError: If the type already has a mapper.
        """
        key = type_key(entity_type)
        if key in self._mappers:
            raise MappingError(f"A mapper is already configured for type {type_name(entity_type)}")

        if creator is not None:
            mapper: Any = FunctionMapper(entity_type, creator)
        else:
            mapper = PropertyMapperBuilder(entity_type, condition, self._value_converters)
        self._mappers[key] = mapper
        return mapper

    def get(self, entity_type: Any) -> Mapper[Any]:
        """Mapper for *entity_type*, registering a default one if needed."""
        key = type_key(entity_type)
        entry = self._mappers.get(key)
        if entry is None:
            entry = self._create_default(entity_type)
            self._mappers[key] = entry
            logger.debug("Registered %r for %s", entry, type_name(entity_type))
        if isinstance(entry, PropertyMapperBuilder):
            entry = entry.build()
            self._mappers[key] = entry
        return entry

    def get_property_mapper(self, entity_type: type) -> PropertyMapper[Any]:
        """Mapper for *entity_type*, which must be a ``PropertyMapper``."""
        mapper = self.get(entity_type)
        if not isinstance(mapper, PropertyMapper):
            raise MappingError(
                f"Type {type_name(entity_type)} is mapped by {type(mapper).__name__}, "
                "not a PropertyMapper"
            )
        return mapper

    def has_mapper(self, entity_type: Any) -> bool:
        return type_key(entity_type) in self._mappers

    def _create_default(self, entity_type: Any) -> Mapper[Any]:
        if is_tuple_type(entity_type):
            return TupleMapper(entity_type, self._value_converters)
        if is_value_type(entity_type):
            return ValueMapper(entity_type)
        return PropertyMapperBuilder(
            entity_type, value_converters=self._value_converters
        ).build()

    # --- Value converters ---

    def add_value_converter(
        self,
        value_type: Any,
        conversion: Callable[[Any], Any] | ValueConverter[Any],
    ) -> None:
        """Register a custom conversion for attributes and tuple slots of *value_type*.

        Raises:
            MappingError: If a converter is already registered for the type.
        """
        key = type_key(value_type)
        if key in self._value_converters:
            raise MappingError(
                f"A value converter is already registered for type {type_name(value_type)}"
            )
        if not isinstance(conversion, ValueConverter):
            conversion = ValueConverter(value_type, conversion)
        self._value_converters[key] = conversion

    def has_value_converter(self, value_type: Any) -> bool:
        return type_key(value_type) in self._value_converters

    def get_value_converter(self, value_type: Any) -> ValueConverter[Any] | None:
        return find_value_converter(self._value_converters, value_type)
