"""Lazy, single-pass entity reader over a row cursor.

Iterating the reader advances the cursor one row per entity. The cursor
is closed when the rows run out, when the reader is closed or leaves a
``with`` block, and when mapping a row raises.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Any, Generic, TypeVar

from row_bind.core.cursor import RowCursor
from row_bind.mapping.protocol import Mapper
from row_bind.mapping.record import Record

T = TypeVar("T")


class ReaderState(Enum):
    CREATED = "created"
    ITERATING = "iterating"
    CLOSED = "closed"


class EntityReader(Generic[T]):
    """Forward-only sequence of entities mapped from a cursor.

    The reader can be iterated once. A second iteration, or one started
    after ``close()``, yields nothing.

    Args:
        cursor: Source of rows. The reader takes ownership and closes it.
        mapper: Turns each row into an entity.
    """

    def __init__(self, cursor: RowCursor, mapper: Mapper[T]) -> None:
        self._cursor = cursor
        self._mapper = mapper
        self._state = ReaderState.CREATED

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._cursor.is_closed

    @property
    def mapper(self) -> Mapper[T]:
        return self._mapper

    def __iter__(self) -> Iterator[T]:
        if self._state is not ReaderState.CREATED:
            return
        self._state = ReaderState.ITERATING
        try:
            record = Record(self._cursor)
            while self._cursor.read():
                yield self._mapper.create_instance(record)
        finally:
            self.close()

    def close(self) -> None:
        """Close the underlying cursor. Safe to call more than once."""
        if self._state is ReaderState.CLOSED:
            return
        self._state = ReaderState.CLOSED
        self._cursor.close()

    def to_list(self) -> list[T]:
        """Read all remaining entities and close the reader."""
        try:
            return list(self)
        finally:
            self.close()

    def first(self) -> T | None:
        """Return the first entity, or None if there are no rows, and close the reader."""
        entities = iter(self)
        try:
            return next(entities, None)
        finally:
            entities.close()  # type: ignore[attr-defined]
            self.close()

    def __enter__(self) -> EntityReader[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"EntityReader({self._mapper!r}, state={self._state.value})"
