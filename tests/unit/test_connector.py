"""Unit tests for DbConnector against an in-memory SQLite database."""

from __future__ import annotations

import datetime
from dataclasses import dataclass

import pytest

from row_bind.core.connection import ConnectionConfig
from row_bind.core.connector import DbConnector
from row_bind.core.exceptions import (
    AdapterError,
    BindingError,
    ConnectionError,
    MappingError,
    ParameterBindingError,
)
from row_bind.mapping.registry import MapperRegistry
from row_bind.reader.entity import EntityReader


@dataclass
class Person:
    id: int = 0
    name: str | None = None
    role: str | None = None


@dataclass
class Profile:
    id: int = 0
    nom: str | None = None
    born: datetime.datetime | None = None
    rating: float | None = None


@pytest.fixture
def people(connector: DbConnector) -> DbConnector:
    connector.mappers.configure(Person).map("name", "nom")
    return connector


class TestQuery:
    def test_maps_renamed_field(self, people: DbConnector) -> None:
        result = people.query(Person, "SELECT id, nom, role FROM people ORDER BY id")
        assert result == [Person(10, "John Q", "Tester"), Person(11, "Jane R", "Developer")]

    def test_named_parameters(self, people: DbConnector) -> None:
        result = people.query(Person, "SELECT id, nom, role FROM people WHERE id = :id", {"id": 11})
        assert result == [Person(11, "Jane R", "Developer")]

    def test_parameter_markers_stripped(self, people: DbConnector) -> None:
        result = people.query(Person, "SELECT id, nom FROM people WHERE id = :id", {"@id": 10})
        assert [p.name for p in result] == ["John Q"]

    def test_object_parameters(self, people: DbConnector) -> None:
        result = people.query(
            Person, "SELECT id, nom, role FROM people WHERE role = :role", Person(role="Tester")
        )
        assert [p.id for p in result] == [10]

    def test_converts_column_types(self, connector: DbConnector) -> None:
        first, second = connector.query(Profile, "SELECT * FROM people ORDER BY id")
        assert first.born == datetime.datetime(2018, 4, 2, 8, 30, 1)
        assert first.rating == 4.5
        assert second.born is None
        assert second.rating is None

    def test_auto_registered_mapper_ignores_unmatched_fields(self, connector: DbConnector) -> None:
        result = connector.query(Person, "SELECT id, role FROM people WHERE id = 10")
        assert result == [Person(10, None, "Tester")]

    def test_tuple_results(self, connector: DbConnector) -> None:
        rows = connector.query(tuple[int, datetime.datetime], "SELECT id, born FROM people ORDER BY id")
        assert rows == [
            (10, datetime.datetime(2018, 4, 2, 8, 30, 1)),
            (11, datetime.datetime.min),
        ]

    def test_value_results(self, connector: DbConnector) -> None:
        assert connector.query(str, "SELECT nom FROM people ORDER BY id") == ["John Q", "Jane R"]

    def test_conversion_failure(self, connector: DbConnector) -> None:
        with pytest.raises(BindingError):
            connector.query(int, "SELECT nom FROM people")

    def test_empty_result(self, people: DbConnector) -> None:
        assert people.query(Person, "SELECT id, nom FROM people WHERE id = -1") == []

    def test_bad_sql(self, people: DbConnector) -> None:
        with pytest.raises(ParameterBindingError, match="no such table"):
            people.query(Person, "SELECT * FROM missing")

    def test_stored_procedure_unsupported(self, people: DbConnector) -> None:
        with pytest.raises(AdapterError, match="stored procedures"):
            people.query(Person, "get_people")


class TestQueryReader:
    def test_returns_lazy_reader(self, people: DbConnector) -> None:
        reader = people.query_reader(Person, "SELECT id, nom FROM people ORDER BY id")
        assert isinstance(reader, EntityReader)
        assert [p.id for p in reader] == [10, 11]

    def test_reader_holds_connection_until_closed(self, people: DbConnector) -> None:
        reader = people.query_reader(Person, "SELECT id, nom FROM people ORDER BY id")
        with pytest.raises(ConnectionError):
            people.query_scalar("SELECT 1")
        reader.close()
        assert people.query_scalar("SELECT 1") == 1

    def test_exhausted_reader_releases_connection(self, people: DbConnector) -> None:
        reader = people.query_reader(Person, "SELECT id FROM people")
        assert len(list(reader)) == 2
        assert people.query_scalar("SELECT 1") == 1

    def test_failed_command_releases_connection(self, people: DbConnector) -> None:
        with pytest.raises(ParameterBindingError):
            people.query_reader(Person, "SELECT * FROM missing")
        assert people.query_scalar("SELECT 1") == 1

    def test_unmappable_type_does_not_take_connection(self, people: DbConnector) -> None:
        with pytest.raises(MappingError):
            people.query_reader(tuple[int, ...], "SELECT id FROM people")
        assert people.query_scalar("SELECT 1") == 1


class TestScalars:
    def test_query_scalar(self, connector: DbConnector) -> None:
        assert connector.query_scalar("SELECT COUNT(*) FROM people") == 2

    def test_query_scalar_no_rows(self, connector: DbConnector) -> None:
        assert connector.query_scalar("SELECT id FROM people WHERE id = -1") is None

    def test_query_scalar_null(self, connector: DbConnector) -> None:
        assert connector.query_scalar("SELECT born FROM people WHERE id = 11") is None

    def test_query_value_converts(self, connector: DbConnector) -> None:
        born = connector.query_value(datetime.datetime, "SELECT born FROM people WHERE id = 10")
        assert born == datetime.datetime(2018, 4, 2, 8, 30, 1)

    def test_query_value_null_default(self, connector: DbConnector) -> None:
        assert connector.query_value(float, "SELECT rating FROM people WHERE id = 11") == 0.0
        assert connector.query_value(float | None, "SELECT rating FROM people WHERE id = 11") is None


class TestNonQuery:
    def test_returns_row_count(self, connector: DbConnector) -> None:
        affected = connector.non_query("UPDATE people SET role = :role", {"role": "Lead"})
        assert affected == 2

    def test_commits(self, connector: DbConnector) -> None:
        connector.non_query(
            "INSERT INTO people (id, nom) VALUES (:id, :nom)", {"id": 12, "nom": "Ann"}
        )
        assert connector.query_scalar("SELECT COUNT(*) FROM people") == 3

    def test_failure_rolls_back(self, connector: DbConnector) -> None:
        with pytest.raises(ParameterBindingError):
            connector.non_query("INSERT INTO people (id, nom) VALUES (10, 'dup')")
        assert connector.query_scalar("SELECT COUNT(*) FROM people") == 2


class TestConnector:
    def test_own_registry_by_default(self, sqlite_config: ConnectionConfig) -> None:
        first = DbConnector(sqlite_config)
        second = DbConnector(sqlite_config)
        assert first.mappers is not second.mappers

    def test_shared_registry(self, sqlite_config: ConnectionConfig) -> None:
        registry = MapperRegistry()
        assert DbConnector(sqlite_config, registry).mappers is registry

    def test_unsupported_driver(self) -> None:
        with pytest.raises(AdapterError, match="Unsupported database driver"):
            DbConnector(ConnectionConfig(driver="db2", database="x"))

    def test_context_manager_closes_pool(self, sqlite_config: ConnectionConfig) -> None:
        with DbConnector(sqlite_config) as db:
            assert db.query_scalar("SELECT 1") == 1
        assert db.connection_manager._pool is None

    def test_entity_rows(self, people: DbConnector) -> None:
        rows = people.entity_rows([Person(1, "Ann", "Dev")])
        assert rows.field_names == ["id", "nom", "role"]
        assert list(rows) == [(1, "Ann", "Dev")]

    def test_entity_rows_empty_needs_type(self, people: DbConnector) -> None:
        with pytest.raises(MappingError):
            people.entity_rows([])
        assert people.entity_rows([], Person).field_count == 3
