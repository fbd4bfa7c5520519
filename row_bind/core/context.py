"""Database context - one connection, one transaction.

Use it as a context manager: it commits on success and rolls back when
the block raises. Queries run inside the transaction and map rows with
the owning connector's mapper registry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any, TypeVar

from row_bind.core.cursor import DbApiCursor
from row_bind.core.exceptions import (
    MappingError,
    ParameterBindingError,
    RowBindError,
    TransactionStateError,
)
from row_bind.core.params import coerce_params, is_raw_sql, normalize_params
from row_bind.mapping.converter import to_type, type_name
from row_bind.mapping.registry import MapperRegistry
from row_bind.reader.entity import EntityReader
from row_bind.reader.rows import EntityRowAdapter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _TxState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


def execute_command(adapter: Any, connection: Any, command: str, params: Any = None) -> Any:
    """Run ad hoc SQL or a stored procedure and return the driver cursor.

    Driver errors are wrapped in ``ParameterBindingError``.
    """
    bound = coerce_params(params)
    count = len(bound) if bound is not None else 0
    try:
        if is_raw_sql(command):
            sql = normalize_params(command, adapter.paramstyle)
            logger.debug("Executing SQL (%d params): %s", count, sql)
            return adapter.execute(connection, sql, bound)
        logger.debug("Calling procedure %s (%d params)", command, count)
        return adapter.call_procedure(connection, command, bound)
    except RowBindError:
        raise
    except Exception as e:
        logger.error("Command failed: %s: %s", command, e)
        raise ParameterBindingError(command, str(e)) from e


def read_scalar(cursor: Any) -> Any:
    """First column of the first row, or None when there are no rows."""
    rows = DbApiCursor(cursor)
    try:
        if not rows.read():
            return None
        return rows.get_value(0)
    finally:
        rows.close()


def resolve_entity_rows(
    mappers: MapperRegistry,
    entities: Iterable[Any],
    entity_type: type | None = None,
) -> EntityRowAdapter[Any]:
    """Wrap *entities* in an ``EntityRowAdapter`` using the registry's mapper."""
    if entity_type is None:
        entities = list(entities)
        if not entities:
            raise MappingError("entity_type is required when entities is empty")
        entity_type = type(entities[0])
    return EntityRowAdapter(entities, mappers.get_property_mapper(entity_type))


class DbContext:
    """Transaction-scoped query context.

    Args:
        connection: Connection acquired for this context.
        adapter: Adapter for the connection's backend.
        mappers: Mapper registry used to map query results.
        release: Callback returning the connection to its pool on exit.
    """

    def __init__(
        self,
        connection: Any,
        adapter: Any,
        mappers: MapperRegistry,
        release: Any = None,
    ) -> None:
        self._connection = connection
        self._adapter = adapter
        self._mappers = mappers
        self._release = release
        self._state = _TxState.IDLE

    @property
    def connection(self) -> Any:
        return self._connection

    @property
    def mappers(self) -> MapperRegistry:
        return self._mappers

    @property
    def state(self) -> str:
        return self._state.value

    def __enter__(self) -> DbContext:
        self._state = _TxState.ACTIVE
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        try:
            if self._state == _TxState.ACTIVE:
                if exc_type is not None:
                    self._connection.rollback()
                    self._state = _TxState.ROLLED_BACK
                    logger.debug("Rolled back after %s", exc_type.__name__)
                else:
                    self._connection.commit()
                    self._state = _TxState.COMMITTED
        finally:
            if self._release is not None:
                self._release(self._connection)
                self._release = None

    def non_query(self, sql: str, params: Any = None) -> int:
        """Execute a write command within this transaction. Returns affected row count."""
        self._check_active()
        cursor = execute_command(self._adapter, self._connection, sql, params)
        return int(cursor.rowcount)

    def query_reader(self, entity_type: Any, sql: str, params: Any = None) -> EntityReader[Any]:
        """Lazily map rows to *entity_type*."""
        self._check_active()
        mapper = self._mappers.get(entity_type)
        cursor = execute_command(self._adapter, self._connection, sql, params)
        return EntityReader(DbApiCursor(cursor), mapper)

    def query(self, entity_type: Any, sql: str, params: Any = None) -> list[Any]:
        """Map all rows to *entity_type*."""
        return self.query_reader(entity_type, sql, params).to_list()

    def query_scalar(self, sql: str, params: Any = None) -> Any:
        """Raw first column of the first row."""
        self._check_active()
        return read_scalar(execute_command(self._adapter, self._connection, sql, params))

    def query_value(self, result_type: Any, sql: str, params: Any = None) -> Any:
        """First column of the first row, converted to *result_type*."""
        return to_type(self.query_scalar(sql, params), result_type)

    def entity_rows(
        self, entities: Iterable[Any], entity_type: type | None = None
    ) -> EntityRowAdapter[Any]:
        return resolve_entity_rows(self._mappers, entities, entity_type)

    def bulk_insert(self, table: str, rows: EntityRowAdapter[Any] | Iterable[Any]) -> int:
        """Insert every row into *table* with a single ``executemany``.

        *rows* is an ``EntityRowAdapter`` or a collection of entities.
        Returns the number of rows written.
        """
        self._check_active()
        if not isinstance(rows, EntityRowAdapter):
            entities = list(rows)
            if not entities:
                return 0
            rows = self.entity_rows(entities)
        quote = self._adapter.quote_identifier
        columns = ", ".join(quote(name) for name in rows.field_names)
        placeholders = ", ".join([self._adapter.positional_placeholder] * rows.field_count)
        sql = f"INSERT INTO {quote(table)} ({columns}) VALUES ({placeholders})"

        values = list(rows)
        if not values:
            return 0
        logger.debug("Bulk inserting %d rows: %s", len(values), sql)
        try:
            self._adapter.executemany(self._connection, sql, values)
        except Exception as e:
            logger.error("Bulk insert into %s failed: %s", table, e)
            raise ParameterBindingError(sql, str(e)) from e
        return len(values)

    def commit(self) -> None:
        """Explicitly commit the transaction."""
        if self._state == _TxState.ROLLED_BACK:
            raise TransactionStateError("rolled_back", "commit")
        if self._state == _TxState.COMMITTED:
            raise TransactionStateError("committed", "commit")
        self._connection.commit()
        self._state = _TxState.COMMITTED

    def rollback(self) -> None:
        """Explicitly rollback the transaction."""
        if self._state == _TxState.COMMITTED:
            raise TransactionStateError("committed", "rollback")
        self._connection.rollback()
        self._state = _TxState.ROLLED_BACK

    def _check_active(self) -> None:
        if self._state == _TxState.IDLE:
            raise TransactionStateError("idle", "execute")
        if self._state == _TxState.COMMITTED:
            raise TransactionStateError("committed", "execute")
        if self._state == _TxState.ROLLED_BACK:
            raise TransactionStateError("rolled_back", "execute")

    def __repr__(self) -> str:
        return f"DbContext({type_name(type(self._adapter))}, state={self._state.value})"
