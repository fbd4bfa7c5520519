"""RowBind - map database rows to typed entities and entities back to rows."""

from __future__ import annotations

from row_bind.core.connection import ConnectionConfig, ConnectionManager
from row_bind.core.connector import DbConnector
from row_bind.core.context import DbContext
from row_bind.core.cursor import DbApiCursor, MemoryCursor, RowCursor
from row_bind.core.enums import DatabaseBackend, IgnoreBehavior, PopulationCondition
from row_bind.core.exceptions import (
    AdapterError,
    BindingError,
    ConnectionError,  # noqa: A004
    ExecutionError,
    FieldCountError,
    FieldNotFoundError,
    MappingError,
    ParameterBindingError,
    RowBindError,
    TransactionError,
    TransactionStateError,
)
from row_bind.mapping.converter import Char, DBNull, ValueConverter, to_type
from row_bind.mapping.property import PropertyMapper, PropertyMapperBuilder
from row_bind.mapping.record import Record
from row_bind.mapping.registry import MapperRegistry
from row_bind.mapping.tuples import TupleMapper
from row_bind.mapping.value import FunctionMapper, ValueMapper
from row_bind.reader.entity import EntityReader
from row_bind.reader.rows import EntityRowAdapter

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Execution
    "DbConnector",
    "DbContext",
    # Cursors
    "RowCursor",
    "DbApiCursor",
    "MemoryCursor",
    # Mapping
    "Record",
    "MapperRegistry",
    "PropertyMapper",
    "PropertyMapperBuilder",
    "TupleMapper",
    "ValueMapper",
    "FunctionMapper",
    "ValueConverter",
    "Char",
    "DBNull",
    "to_type",
    # Readers
    "EntityReader",
    "EntityRowAdapter",
    # Enums
    "DatabaseBackend",
    "PopulationCondition",
    "IgnoreBehavior",
    # Exceptions
    "RowBindError",
    "MappingError",
    "BindingError",
    "FieldCountError",
    "FieldNotFoundError",
    "ExecutionError",
    "ParameterBindingError",
    "TransactionError",
    "TransactionStateError",
    "AdapterError",
    "ConnectionError",
]
