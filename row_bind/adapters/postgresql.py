"""PostgreSQL adapter using psycopg (v3+)."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from row_bind.core.connection import ConnectionConfig
from row_bind.core.exceptions import ConnectionError  # noqa: A004


def _build_conninfo(config: ConnectionConfig) -> str:
    """Build a libpq connection string from config fields."""
    parts: list[str] = []
    if config.host is not None:
        parts.append(f"host={config.host}")
    if config.port is not None:
        parts.append(f"port={config.port}")
    if config.user is not None:
        parts.append(f"user={config.user}")
    if config.password is not None:
        parts.append(f"password={config.password}")
    parts.append(f"dbname={config.database}")
    return " ".join(parts)


class PostgresqlAdapter:
    """Synchronous PostgreSQL adapter using psycopg (v3+)."""

    @property
    def paramstyle(self) -> str:
        return "pyformat"

    @property
    def positional_placeholder(self) -> str:
        return "%s"

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        import psycopg
        import psycopg.rows

        conninfo = _build_conninfo(config)
        options = f"-c statement_timeout={config.command_timeout * 1000}"
        pool: list[Any] = []
        for _ in range(config.pool_size):
            try:
                conn = psycopg.connect(
                    conninfo,
                    row_factory=psycopg.rows.dict_row,
                    options=options,
                    **config.extra,
                )
            except psycopg.OperationalError as e:
                raise ConnectionError(f"Could not connect to PostgreSQL: {e}") from e
            pool.append(conn)
        return pool

    def acquire_connection(self, pool: list[Any]) -> Any:
        if not pool:
            raise ConnectionError("No connections available in pool")
        return pool.pop()

    def release_connection(self, connection: Any, pool: list[Any]) -> None:
        pool.append(connection)

    def close_pool(self, pool: list[Any]) -> None:
        for conn in pool:
            conn.close()
        pool.clear()

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> Any:
        return connection.execute(sql, params)

    def executemany(
        self,
        connection: Any,
        sql: str,
        rows: Iterable[tuple[Any, ...]],
    ) -> Any:
        cursor = connection.cursor()
        cursor.executemany(sql, rows)
        return cursor

    def call_procedure(
        self,
        connection: Any,
        name: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> Any:
        if params is None:
            return connection.execute(f"CALL {name}()")
        if isinstance(params, dict):
            args = ", ".join(f"{key} => %({key})s" for key in params)
        else:
            args = ", ".join(["%s"] * len(params))
        return connection.execute(f"CALL {name}({args})", params)

    def quote_identifier(self, identifier: str) -> str:
        return '"' + identifier.replace('"', '""') + '"'
