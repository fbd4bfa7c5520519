"""Contract tests for adapter protocol compliance."""

from __future__ import annotations

from typing import Any

import pytest

from row_bind.adapters.postgresql import PostgresqlAdapter
from row_bind.adapters.protocol import SyncAdapter
from row_bind.adapters.sqlite import SqliteAdapter
from row_bind.core.connection import ConnectionConfig, _load_adapter
from row_bind.core.enums import DatabaseBackend
from row_bind.core.exceptions import AdapterError, ConnectionError


class RecordingConnection:
    """Stands in for a driver connection and records executed statements."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def execute(self, sql: str, params: Any = None) -> str:
        self.calls.append((sql, params))
        return "cursor"


class TestSqliteAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        assert isinstance(SqliteAdapter(), SyncAdapter)

    def test_paramstyle(self) -> None:
        adapter = SqliteAdapter()
        assert adapter.paramstyle == "named"
        assert adapter.positional_placeholder == "?"

    def test_lifecycle(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteAdapter()
        pool = adapter.create_pool(sqlite_config)
        assert len(pool) == 1

        conn = adapter.acquire_connection(pool)
        assert conn is not None

        cursor = adapter.execute(conn, "SELECT :val AS val", {"val": 1})
        row = cursor.fetchone()
        assert row["val"] == 1

        adapter.release_connection(conn, pool)
        assert len(pool) == 1

        adapter.close_pool(pool)
        assert len(pool) == 0

    def test_empty_pool(self) -> None:
        with pytest.raises(ConnectionError):
            SqliteAdapter().acquire_connection([])

    def test_executemany(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteAdapter()
        pool = adapter.create_pool(sqlite_config)
        conn = adapter.acquire_connection(pool)
        conn.execute("CREATE TABLE t (a INTEGER, b TEXT)")
        adapter.executemany(conn, "INSERT INTO t (a, b) VALUES (?, ?)", [(1, "x"), (2, "y")])
        assert adapter.execute(conn, "SELECT COUNT(*) AS n FROM t").fetchone()["n"] == 2
        adapter.release_connection(conn, pool)
        adapter.close_pool(pool)

    def test_no_stored_procedures(self) -> None:
        with pytest.raises(AdapterError, match="get_people"):
            SqliteAdapter().call_procedure(None, "get_people")

    def test_quote_identifier(self) -> None:
        assert SqliteAdapter().quote_identifier('we"ird') == '"we""ird"'


class TestPostgresqlAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        assert isinstance(PostgresqlAdapter(), SyncAdapter)

    def test_paramstyle(self) -> None:
        adapter = PostgresqlAdapter()
        assert adapter.paramstyle == "pyformat"
        assert adapter.positional_placeholder == "%s"

    def test_call_procedure_named(self) -> None:
        conn = RecordingConnection()
        PostgresqlAdapter().call_procedure(conn, "add_person", {"id": 1, "nom": "Ann"})
        assert conn.calls == [
            ("CALL add_person(id => %(id)s, nom => %(nom)s)", {"id": 1, "nom": "Ann"})
        ]

    def test_call_procedure_positional(self) -> None:
        conn = RecordingConnection()
        PostgresqlAdapter().call_procedure(conn, "add_person", (1, "Ann"))
        assert conn.calls == [("CALL add_person(%s, %s)", (1, "Ann"))]

    def test_call_procedure_without_params(self) -> None:
        conn = RecordingConnection()
        PostgresqlAdapter().call_procedure(conn, "refresh")
        assert conn.calls == [("CALL refresh()", None)]

    def test_quote_identifier(self) -> None:
        assert PostgresqlAdapter().quote_identifier("people") == '"people"'


class TestAdapterLoading:
    @pytest.mark.parametrize(
        ("driver", "adapter_type"),
        [
            ("sqlite", SqliteAdapter),
            ("SQLite", SqliteAdapter),
            ("postgresql", PostgresqlAdapter),
            (DatabaseBackend.POSTGRESQL, PostgresqlAdapter),
        ],
    )
    def test_loads_by_driver(self, driver: object, adapter_type: type) -> None:
        assert isinstance(_load_adapter(driver), adapter_type)

    def test_unknown_driver(self) -> None:
        with pytest.raises(AdapterError, match="Unsupported database driver: mssql"):
            _load_adapter("mssql")
