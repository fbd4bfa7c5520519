"""Connection configuration and management.

ConnectionConfig is a Pydantic model for type-safe connection config.
ConnectionManager loads the adapter for the configured driver and owns a
simple list-based connection pool.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel, Field

from row_bind.core.enums import DatabaseBackend
from row_bind.core.exceptions import AdapterError

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    pool_size: int = Field(default=5, ge=1)
    command_timeout: int = 300  # seconds
    extra: dict[str, Any] = {}


# Adapter module mapping: backend -> (module_path, class_name)
_ADAPTER_MAP: dict[DatabaseBackend, tuple[str, str]] = {
    DatabaseBackend.SQLITE: ("row_bind.adapters.sqlite", "SqliteAdapter"),
    DatabaseBackend.POSTGRESQL: ("row_bind.adapters.postgresql", "PostgresqlAdapter"),
}


def _load_adapter(driver: str | DatabaseBackend) -> Any:
    """Load an adapter by driver name or backend."""
    try:
        backend = DatabaseBackend(driver.lower() if isinstance(driver, str) else driver)
    except ValueError:
        raise AdapterError(f"Unsupported database driver: {driver}") from None

    module_path, cls_name = _ADAPTER_MAP[backend]
    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{driver}': {e}") from e


class ConnectionManager:
    """Connection manager using the SyncAdapter protocol."""

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self._adapter = _load_adapter(config.driver)
        self._pool: Any = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    def initialize_pool(self) -> Any:
        """Initialize the connection pool."""
        if self._pool is None:
            self._pool = self._adapter.create_pool(self.config)
            logger.debug(
                "Opened %s pool with %d connections", self.config.driver, self.config.pool_size
            )
        return self._pool

    def acquire(self) -> Any:
        """Take a connection from the pool. Pair with ``release``."""
        if self._pool is None:
            self.initialize_pool()
        return self._adapter.acquire_connection(self._pool)

    def release(self, connection: Any) -> None:
        """Return a connection taken with ``acquire``."""
        if self._pool is not None:
            self._adapter.release_connection(connection, self._pool)

    @contextmanager
    def get_connection(self) -> Iterator[Any]:
        """Get a connection from the pool as a context manager."""
        connection = self.acquire()
        try:
            yield connection
        finally:
            self.release(connection)

    def close_pool(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            self._adapter.close_pool(self._pool)
            self._pool = None
