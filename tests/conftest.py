"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

import pytest

from row_bind.core.connection import ConnectionConfig
from row_bind.core.connector import DbConnector
from row_bind.core.cursor import MemoryCursor
from row_bind.mapping.record import Record


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config.

    One pooled connection, so every call sees the same in-memory database.
    """
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def connector(sqlite_config: ConnectionConfig) -> Iterator[DbConnector]:
    """Connector over an in-memory database with a seeded ``people`` table."""
    db = DbConnector(sqlite_config)
    with db.connection_manager.get_connection() as conn:
        conn.execute(
            "CREATE TABLE people ("
            "id INTEGER PRIMARY KEY, nom TEXT, role TEXT, born TEXT, rating REAL)"
        )
        conn.execute(
            "INSERT INTO people (id, nom, role, born, rating) VALUES "
            "(10, 'John Q', 'Tester', '2018-04-02 08:30:01', 4.5), "
            "(11, 'Jane R', 'Developer', NULL, NULL)"
        )
        conn.commit()
    yield db
    db.close()


@pytest.fixture
def make_record():
    """Build a ``Record`` positioned on the first of the given rows.

    Usage:
        record = make_record(["id", "name"], [(1, "Ann")])
    """

    def _make(fields: Sequence[str], rows: Sequence[Sequence[Any]]) -> Record:
        cursor = MemoryCursor(fields, rows)
        record = Record(cursor)
        cursor.read()
        return record

    return _make
