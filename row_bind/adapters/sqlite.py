"""SQLite adapter using the stdlib sqlite3 module."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from typing import Any

from row_bind.core.connection import ConnectionConfig
from row_bind.core.exceptions import AdapterError, ConnectionError  # noqa: A004


class SqliteAdapter:
    """Synchronous SQLite adapter. SQLite has no stored procedures."""

    @property
    def paramstyle(self) -> str:
        return "named"

    @property
    def positional_placeholder(self) -> str:
        return "?"

    def create_pool(self, config: ConnectionConfig) -> list[sqlite3.Connection]:
        """Create a 'pool' (list of connections) for SQLite."""
        pool: list[sqlite3.Connection] = []
        for _ in range(config.pool_size):
            try:
                conn = sqlite3.connect(config.database, timeout=config.command_timeout)
            except sqlite3.Error as e:
                raise ConnectionError(f"Could not open SQLite database '{config.database}': {e}") from e
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            pool.append(conn)
        return pool

    def acquire_connection(self, pool: list[sqlite3.Connection]) -> sqlite3.Connection:
        """Acquire a connection from the pool."""
        if not pool:
            raise ConnectionError("No connections available in pool")
        return pool.pop()

    def release_connection(
        self, connection: sqlite3.Connection, pool: list[sqlite3.Connection]
    ) -> None:
        """Release a connection back to the pool."""
        pool.append(connection)

    def close_pool(self, pool: list[sqlite3.Connection]) -> None:
        """Close all connections in the pool."""
        for conn in pool:
            conn.close()
        pool.clear()

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> sqlite3.Cursor:
        """Execute SQL and return a cursor."""
        return connection.execute(sql, params or {})

    def executemany(
        self,
        connection: sqlite3.Connection,
        sql: str,
        rows: Iterable[tuple[Any, ...]],
    ) -> sqlite3.Cursor:
        return connection.executemany(sql, rows)

    def call_procedure(
        self,
        connection: sqlite3.Connection,
        name: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> sqlite3.Cursor:
        raise AdapterError(f"SQLite does not support stored procedures: {name}")

    def quote_identifier(self, identifier: str) -> str:
        return '"' + identifier.replace('"', '""') + '"'
