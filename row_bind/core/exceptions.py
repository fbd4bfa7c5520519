"""row_bind exception hierarchy.

Mapping and binding errors are raised as-is to the caller. Raw driver
exceptions from the execution layer are wrapped before they leave a
connector or context.
"""

from __future__ import annotations

from typing import Any


class RowBindError(Exception):
    """Base exception for all row_bind errors."""


# --- Mapping ---


class MappingError(RowBindError):
    """Raised when a mapper is configured incorrectly."""


class BindingError(RowBindError):
    """Raised when a row value cannot be bound to an entity.

    Carries the offending field name, raw value and target type when they
    are known.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        target_type: Any = None,
    ) -> None:
        self.field = field
        self.value = value
        self.target_type = target_type
        super().__init__(message)


class FieldCountError(RowBindError, ValueError):
    """Raised when a record has fewer fields than a tuple type needs."""

    def __init__(self, field_count: int, arity: int) -> None:
        self.field_count = field_count
        self.arity = arity
        super().__init__(
            f"The record has fewer fields ({field_count}) than the tuple type ({arity})."
        )


class FieldNotFoundError(RowBindError, KeyError):
    """Raised when a row adapter is asked for a field it does not expose."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Field not found: '{self.name}'"


# --- Execution ---


class ExecutionError(RowBindError):
    """Base for query execution errors."""


class ParameterBindingError(ExecutionError):
    """Raised on parameter binding failures."""

    def __init__(self, sql: str, detail: str) -> None:
        self.sql = sql
        super().__init__(f"Parameter binding error for '{sql}': {detail}")


# --- Transaction ---


class TransactionError(RowBindError):
    """Base for transaction errors."""


class TransactionStateError(TransactionError):
    """Raised on invalid transaction state transitions."""

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} transaction in state '{current_state}'")


# --- Adapter ---


class AdapterError(RowBindError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""
