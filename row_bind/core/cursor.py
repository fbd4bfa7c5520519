"""Row cursors consumed by the mapping layer.

The mapping core never opens connections. It reads rows through the
``RowCursor`` protocol, which exposes the current row by ordinal and
advances one row per ``read()`` call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from row_bind.core.exceptions import ExecutionError

logger = logging.getLogger(__name__)


@runtime_checkable
class RowCursor(Protocol):
    """Forward-only cursor over a result set."""

    @property
    def field_count(self) -> int:
        """Number of fields in each row."""
        ...

    @property
    def is_closed(self) -> bool:
        """True once the cursor has been closed."""
        ...

    def get_name(self, ordinal: int) -> str:
        """Field name at the given ordinal."""
        ...

    def get_value(self, ordinal: int) -> Any:
        """Raw value of the current row at the given ordinal."""
        ...

    def read(self) -> bool:
        """Advance to the next row. Returns False when there are no more rows."""
        ...

    def close(self) -> None:
        """Close the cursor. Calling close more than once has no effect."""
        ...


class DbApiCursor:
    """``RowCursor`` over a DB-API 2.0 cursor.

    Handles both tuple-like rows (sqlite3, default psycopg) and dict-like
    rows (psycopg ``dict_row``).

    Args:
        cursor: An executed DB-API cursor.
        on_close: Optional callback run once after the cursor is closed,
            used to hand the connection back to its pool.
    """

    def __init__(self, cursor: Any, on_close: Callable[[], None] | None = None) -> None:
        self._cursor = cursor
        self._on_close = on_close
        self._names = [desc[0] for desc in (cursor.description or [])]
        self._current: tuple[Any, ...] | None = None
        self._closed = False

    @property
    def field_count(self) -> int:
        return len(self._names)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def rowcount(self) -> int:
        return int(self._cursor.rowcount)

    def get_name(self, ordinal: int) -> str:
        return self._names[ordinal]

    def get_value(self, ordinal: int) -> Any:
        if self._current is None:
            raise ExecutionError("No current row; call read() first")
        return self._current[ordinal]

    def read(self) -> bool:
        if self._closed or not self._names:
            return False
        row = self._cursor.fetchone()
        if row is None:
            self._current = None
            return False
        # Already dict-like (e.g., psycopg dict_row)
        if isinstance(row, dict):
            self._current = tuple(row.values())
        else:
            self._current = tuple(row)
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._current = None
        try:
            self._cursor.close()
        finally:
            if self._on_close is not None:
                self._on_close()
        logger.debug("Closed cursor with %d fields", len(self._names))


class MemoryCursor:
    """``RowCursor`` over rows already held in memory.

    Args:
        fields: Field names, in ordinal order.
        rows: Row value sequences, each aligned with ``fields``.
    """

    def __init__(self, fields: Sequence[str], rows: Iterable[Sequence[Any]] = ()) -> None:
        self._names = list(fields)
        self._rows = [tuple(row) for row in rows]
        self._index = -1
        self._closed = False

    @classmethod
    def from_dicts(cls, rows: Sequence[Mapping[str, Any]]) -> MemoryCursor:
        """Build a cursor from mappings; field order follows the first row."""
        if not rows:
            return cls([])
        fields = list(rows[0].keys())
        return cls(fields, [[row.get(name) for name in fields] for row in rows])

    @property
    def field_count(self) -> int:
        return len(self._names)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def get_name(self, ordinal: int) -> str:
        return self._names[ordinal]

    def get_value(self, ordinal: int) -> Any:
        if not 0 <= self._index < len(self._rows):
            raise ExecutionError("No current row; call read() first")
        return self._rows[self._index][ordinal]

    def read(self) -> bool:
        if self._closed:
            return False
        self._index += 1
        return self._index < len(self._rows)

    def close(self) -> None:
        self._closed = True
