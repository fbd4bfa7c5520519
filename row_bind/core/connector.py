"""Database connector.

The connector owns a connection pool and a mapper registry. Each call
takes a connection from the pool, runs one command and gives the
connection back; ``open_context`` holds one connection for a whole
transaction instead.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from row_bind.core.connection import ConnectionConfig, ConnectionManager
from row_bind.core.context import DbContext, execute_command, read_scalar, resolve_entity_rows
from row_bind.core.cursor import DbApiCursor
from row_bind.mapping.converter import to_type
from row_bind.mapping.registry import MapperRegistry
from row_bind.reader.entity import EntityReader
from row_bind.reader.rows import EntityRowAdapter

logger = logging.getLogger(__name__)


class DbConnector:
    """Runs commands and maps their results.

    Args:
        config: Connection settings.
        mappers: Mapper registry to use. Each connector gets its own by default.
    """

    def __init__(self, config: ConnectionConfig, mappers: MapperRegistry | None = None) -> None:
        self._connection_manager = ConnectionManager(config)
        self._mappers = mappers if mappers is not None else MapperRegistry()

    @property
    def config(self) -> ConnectionConfig:
        return self._connection_manager.config

    @property
    def connection_manager(self) -> ConnectionManager:
        return self._connection_manager

    @property
    def mappers(self) -> MapperRegistry:
        return self._mappers

    @property
    def _adapter(self) -> Any:
        return self._connection_manager.adapter

    def non_query(self, sql: str, params: Any = None) -> int:
        """Execute a write command and commit. Returns affected row count."""
        with self._connection_manager.get_connection() as conn:
            try:
                cursor = execute_command(self._adapter, conn, sql, params)
            except Exception:
                conn.rollback()
                raise
            conn.commit()
            return int(cursor.rowcount)

    def query_reader(self, entity_type: Any, sql: str, params: Any = None) -> EntityReader[Any]:
        """Lazily map rows to *entity_type*.

        The reader holds a pooled connection until it is closed or exhausted.
        """
        mapper = self._mappers.get(entity_type)
        conn = self._connection_manager.acquire()
        try:
            cursor = execute_command(self._adapter, conn, sql, params)
        except Exception:
            self._connection_manager.release(conn)
            raise
        return EntityReader(
            DbApiCursor(cursor, on_close=lambda: self._connection_manager.release(conn)),
            mapper,
        )

    def query(self, entity_type: Any, sql: str, params: Any = None) -> list[Any]:
        """Map all rows to *entity_type*."""
        return self.query_reader(entity_type, sql, params).to_list()

    def query_scalar(self, sql: str, params: Any = None) -> Any:
        """Raw first column of the first row, or None when there are no rows."""
        with self._connection_manager.get_connection() as conn:
            return read_scalar(execute_command(self._adapter, conn, sql, params))

    def query_value(self, result_type: Any, sql: str, params: Any = None) -> Any:
        """First column of the first row, converted to *result_type*."""
        return to_type(self.query_scalar(sql, params), result_type)

    def open_context(self) -> DbContext:
        """Open a transaction context holding one pooled connection."""
        conn = self._connection_manager.acquire()
        return DbContext(
            connection=conn,
            adapter=self._adapter,
            mappers=self._mappers,
            release=self._connection_manager.release,
        )

    def entity_rows(
        self, entities: Iterable[Any], entity_type: type | None = None
    ) -> EntityRowAdapter[Any]:
        """Present *entities* as rows, using the registered mapper for their type."""
        return resolve_entity_rows(self._mappers, entities, entity_type)

    def close(self) -> None:
        """Close the connection pool."""
        self._connection_manager.close_pool()

    def __enter__(self) -> DbConnector:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()
