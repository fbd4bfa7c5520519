"""Integration test for the SQLite workflow.

Covers: mapper configuration, name resolution, enum/UUID/JSON conversion,
pydantic and frozen dataclass entities, lazy readers, transactions and bulk
insert round trips against a real SQLite database file.
"""

from __future__ import annotations

import datetime
import enum
import json
import uuid
from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import NamedTuple

import pytest
from pydantic import BaseModel

from row_bind.core.connection import ConnectionConfig
from row_bind.core.connector import DbConnector
from row_bind.core.exceptions import BindingError

# --- Test models ---


class Status(enum.Enum):
    PENDING = 0
    SHIPPED = 1
    CANCELLED = 2


class Order(BaseModel):
    order_id: int
    customer_name: str
    status: Status
    token: uuid.UUID | None = None
    tags: list[str] = []
    total: Decimal
    placed: datetime.date


@dataclass(frozen=True)
class OrderLine:
    order_id: int
    sku: str
    quantity: int = 1


class Summary(NamedTuple):
    status: Status
    orders: int


@dataclass
class Label:
    text: str


TOKEN = uuid.UUID("6f1c8d3e-3b0a-4a8e-9d62-2b7f3f5c9a10")

# --- Fixtures ---


@pytest.fixture
def db(tmp_path: Path) -> Iterator[DbConnector]:
    config = ConnectionConfig(driver="sqlite", database=str(tmp_path / "shop.db"), pool_size=2)
    connector = DbConnector(config)
    connector.non_query(
        "CREATE TABLE orders (order_id INTEGER PRIMARY KEY, customer_name TEXT, "
        "status TEXT, token TEXT, tags TEXT, total TEXT, placed TEXT)"
    )
    connector.non_query(
        "CREATE TABLE order_lines (order_id INTEGER, sku TEXT, quantity INTEGER)"
    )
    (
        connector.mappers.configure(Order)
        .map("status", to_db=lambda s: s.name)
        .map("token", to_db=lambda t: str(t) if t else None)
        .map("tags", to_db=json.dumps)
        .map("total", to_db=str)
        .map("placed", to_db=datetime.date.isoformat)
    )

    with connector.open_context() as ctx:
        ctx.bulk_insert(
            "orders",
            [
                Order(
                    order_id=1,
                    customer_name="Ann",
                    status=Status.SHIPPED,
                    token=TOKEN,
                    tags=["gift", "rush"],
                    total=Decimal("12.50"),
                    placed=datetime.date(2024, 5, 1),
                ),
                Order(
                    order_id=2,
                    customer_name="Bob",
                    status=Status.PENDING,
                    total=Decimal("3.00"),
                    placed=datetime.date(2024, 5, 2),
                ),
            ],
        )
    yield connector
    connector.close()


# --- Tests ---


class TestSqliteWorkflow:
    def test_bulk_insert_round_trip(self, db: DbConnector) -> None:
        orders = db.query(Order, "SELECT * FROM orders ORDER BY order_id")
        assert [o.order_id for o in orders] == [1, 2]
        first, second = orders
        assert first.status is Status.SHIPPED
        assert first.token == TOKEN
        assert first.tags == ["gift", "rush"]
        assert first.total == Decimal("12.50")
        assert first.placed == datetime.date(2024, 5, 1)
        assert second.token is None
        assert second.tags == []

    def test_stored_values_use_to_db(self, db: DbConnector) -> None:
        assert db.query_scalar("SELECT status FROM orders WHERE order_id = 1") == "SHIPPED"
        assert db.query_scalar("SELECT tags FROM orders WHERE order_id = 2") == "[]"

    def test_camel_case_columns_resolve(self, db: DbConnector) -> None:
        sql = (
            "SELECT order_id AS OrderId, customer_name AS CustomerName, status AS Status, "
            "total AS Total, placed AS Placed FROM orders WHERE order_id = :id"
        )
        order = db.query_reader(Order, sql, {"id": 1}).first()
        assert order is not None
        assert order.customer_name == "Ann"
        assert order.order_id == 1

    def test_enum_by_value_and_case_insensitive_name(self, db: DbConnector) -> None:
        db.non_query("UPDATE orders SET status = '2' WHERE order_id = 1")
        db.non_query("UPDATE orders SET status = 'pending' WHERE order_id = 2")
        statuses = db.query(Status, "SELECT status FROM orders ORDER BY order_id")
        assert statuses == [Status.CANCELLED, Status.PENDING]

    def test_invalid_enum(self, db: DbConnector) -> None:
        db.non_query("UPDATE orders SET status = 'LOST' WHERE order_id = 1")
        with pytest.raises(BindingError, match="Status"):
            db.query(Order, "SELECT * FROM orders")

    def test_named_tuple_aggregate(self, db: DbConnector) -> None:
        rows = db.query(
            Summary, "SELECT status, COUNT(*) FROM orders GROUP BY status ORDER BY status"
        )
        assert rows == [Summary(Status.PENDING, 1), Summary(Status.SHIPPED, 1)]

    def test_frozen_dataclass_lines(self, db: DbConnector) -> None:
        lines = [OrderLine(1, "A-1", 2), OrderLine(1, "B-7"), OrderLine(2, "A-1", 5)]
        with db.open_context() as ctx:
            assert ctx.bulk_insert("order_lines", lines) == 3
        stored = db.query(OrderLine, "SELECT * FROM order_lines ORDER BY order_id, sku")
        assert stored == lines

    def test_value_converter_and_after_binding(self, db: DbConnector) -> None:
        seen: list[str] = []
        db.mappers.add_value_converter(str, lambda v: v.strip().upper())
        db.mappers.configure(OrderLine).map_not_null("sku").after_binding(
            lambda record, line: seen.append(record.get_str("sku"))
        )
        db.non_query("INSERT INTO order_lines VALUES (:order_id, :sku, :quantity)", OrderLine(9, " z-1 "))
        line = db.query_reader(OrderLine, "SELECT * FROM order_lines").first()
        assert line == OrderLine(9, "Z-1", 1)
        assert seen == [" z-1 "]

    def test_not_null_violation(self, db: DbConnector) -> None:
        db.mappers.configure(OrderLine).not_null("sku")
        db.non_query("INSERT INTO order_lines (order_id, quantity) VALUES (3, 1)")
        with pytest.raises(BindingError, match="may not be null"):
            db.query(OrderLine, "SELECT * FROM order_lines")

    def test_function_mapper(self, db: DbConnector) -> None:
        db.mappers.configure(
            Label, creator=lambda record: Label(f"{record['customer_name']}#{record.get_int('order_id')}")
        )
        labels = db.query(Label, "SELECT customer_name, order_id FROM orders ORDER BY order_id")
        assert labels == [Label("Ann#1"), Label("Bob#2")]

    def test_tuple_rows(self, db: DbConnector) -> None:
        rows = db.query(tuple[str, Decimal], "SELECT customer_name, total FROM orders ORDER BY order_id")
        assert rows == [("Ann", Decimal("12.50")), ("Bob", Decimal("3.00"))]

    def test_pool_serves_concurrent_readers(self, db: DbConnector) -> None:
        outer = db.query_reader(int, "SELECT order_id FROM orders ORDER BY order_id")
        inner = db.query_reader(str, "SELECT customer_name FROM orders ORDER BY order_id")
        assert inner.first() == "Ann"
        assert outer.to_list() == [1, 2]
        assert outer.is_closed
        assert inner.is_closed
        assert db.query_scalar("SELECT COUNT(*) FROM orders") == 2

    def test_transaction_rollback(self, db: DbConnector) -> None:
        with pytest.raises(RuntimeError), db.open_context() as ctx:
            ctx.non_query("DELETE FROM orders")
            raise RuntimeError("abort")
        assert db.query_value(int, "SELECT COUNT(*) FROM orders") == 2
