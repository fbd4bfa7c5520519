"""Database adapter protocol.

Every adapter module implements this protocol so connectors and
contexts can drive any backend the same way.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from row_bind.core.connection import ConnectionConfig


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous database adapter protocol."""

    @property
    def paramstyle(self) -> str:
        """Parameter binding style: 'named' (:name) or 'pyformat' (%(name)s)."""
        ...

    @property
    def positional_placeholder(self) -> str:
        """Placeholder for positional parameters ('?' or '%s')."""
        ...

    def create_pool(self, config: ConnectionConfig) -> Any:
        """Create a connection pool."""
        ...

    def acquire_connection(self, pool: Any) -> Any:
        """Acquire a connection from the pool."""
        ...

    def release_connection(self, connection: Any, pool: Any) -> None:
        """Release a connection back to the pool."""
        ...

    def close_pool(self, pool: Any) -> None:
        """Close the pool and release all connections."""
        ...

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> Any:
        """Execute SQL and return a cursor-like object."""
        ...

    def executemany(
        self,
        connection: Any,
        sql: str,
        rows: Iterable[tuple[Any, ...]],
    ) -> Any:
        """Execute SQL once per parameter row and return a cursor-like object."""
        ...

    def call_procedure(
        self,
        connection: Any,
        name: str,
        params: dict[str, Any] | tuple[Any, ...] | None = None,
    ) -> Any:
        """Invoke a stored procedure and return a cursor-like object."""
        ...

    def quote_identifier(self, identifier: str) -> str:
        """Quote a table or column name for use in generated SQL."""
        ...
