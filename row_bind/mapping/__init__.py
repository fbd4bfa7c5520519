"""Mapping layer - turn record rows into typed entities."""

from __future__ import annotations

from row_bind.mapping.binding import PropertyBinding, PropertyInfo, describe_properties
from row_bind.mapping.converter import (
    Char,
    DBNull,
    ValueConverter,
    convert_value,
    default_for,
    is_null,
    to_type,
)
from row_bind.mapping.property import PropertyMapper, PropertyMapperBuilder
from row_bind.mapping.protocol import Mapper
from row_bind.mapping.record import Record
from row_bind.mapping.registry import MapperRegistry
from row_bind.mapping.tuples import TupleMapper
from row_bind.mapping.value import FunctionMapper, ValueMapper

__all__ = [
    "Record",
    "Mapper",
    "PropertyMapper",
    "PropertyMapperBuilder",
    "PropertyBinding",
    "PropertyInfo",
    "describe_properties",
    "TupleMapper",
    "ValueMapper",
    "FunctionMapper",
    "MapperRegistry",
    "ValueConverter",
    "Char",
    "DBNull",
    "convert_value",
    "default_for",
    "is_null",
    "to_type",
]
