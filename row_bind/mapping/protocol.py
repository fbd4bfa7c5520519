"""Mapper protocol.

All mappers implement this interface. ``EntityReader`` calls
create_instance once per row, handing it the ``Record`` positioned on
that row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from row_bind.mapping.record import Record

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Mapper(Protocol[T_co]):
    """Base mapper protocol."""

    @property
    def entity_type(self) -> Any:
        """The type this mapper produces."""
        ...

    def create_instance(self, record: Record) -> T_co:
        """Build one entity from the record's current row."""
        ...
