"""Field directory over the current row of a cursor.

A ``Record`` indexes field names once per cursor and then reads values
live from whatever row the cursor is positioned on. Names resolve
case-insensitively, with a fallback to a normalized alias (letters and
digits only, lowercased) when exactly one field owns that alias. When
several fields share a name, the last of them wins.
"""

from __future__ import annotations

import datetime
import re
import uuid
from collections import defaultdict
from collections.abc import Iterator
from decimal import Decimal
from typing import Any

from row_bind.core.cursor import RowCursor
from row_bind.core.exceptions import BindingError
from row_bind.mapping.converter import Char, default_for, is_null, to_type

_NORMALIZE_RE = re.compile(r"[\W_]")


class Record:
    """Name and ordinal access to the fields of a row cursor.

    Args:
        cursor: The cursor whose current row this record exposes.
    """

    def __init__(self, cursor: RowCursor) -> None:
        self._cursor = cursor
        self._names = [cursor.get_name(i) for i in range(cursor.field_count)]
        # Duplicate names (a join returning ``id`` twice) resolve to the last one
        self._ordinals: dict[str, int] = {}
        for ordinal, name in enumerate(self._names):
            self._ordinals[name.lower()] = ordinal

        groups: dict[str, list[str]] = defaultdict(list)
        for name in self._ordinals:
            normalized = self.normalize_name(name)
            if normalized != name:
                groups[normalized].append(name)

        self._aliases: dict[str, int] = {
            normalized: self._ordinals[names[0]]
            for normalized, names in groups.items()
            if len(names) == 1 and normalized not in self._ordinals
        }

    @staticmethod
    def normalize_name(name: str) -> str:
        """Strip non-alphanumeric characters and underscores, then lowercase."""
        return _NORMALIZE_RE.sub("", name).lower()

    @property
    def cursor(self) -> RowCursor:
        return self._cursor

    @property
    def field_names(self) -> list[str]:
        return list(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_field(name)

    def __getitem__(self, key: int | str) -> Any:
        if isinstance(key, int):
            return self._cursor.get_value(key)
        return self.get_value(key)

    def __repr__(self) -> str:
        return f"Record({self._names!r})"

    # --- Lookup ---

    def get_index(self, name: str) -> int:
        """Ordinal of the named field, or -1 if it does not resolve."""
        ordinal = self._ordinals.get(name.lower())
        if ordinal is not None:
            return ordinal
        normalized = self.normalize_name(name)
        ordinal = self._ordinals.get(normalized)
        if ordinal is not None:
            return ordinal
        return self._aliases.get(normalized, -1)

    def has_field(self, name: str) -> bool:
        return self.get_index(name) >= 0

    def get_name(self, ordinal: int) -> str:
        return self._names[ordinal]

    def get_value(self, name: str) -> Any:
        """Raw value of the named field in the current row.

        Returns None when the name does not resolve.
        """
        ordinal = self.get_index(name)
        if ordinal < 0:
            return None
        return self._cursor.get_value(ordinal)

    def is_null(self, key: int | str) -> bool:
        if isinstance(key, str) and not self.has_field(key):
            return True
        return is_null(self[key])

    # --- Typed access ---

    def _typed(self, key: int | str, target: Any) -> Any:
        if isinstance(key, str) and not self.has_field(key):
            raise BindingError(
                f"Field not found in the record: {key}", field=key, target_type=target
            )
        value = self[key]
        field = key if isinstance(key, str) else self._names[key]
        if is_null(value):
            raise BindingError(
                f"The value of {field} is null.", field=field, target_type=target
            )
        try:
            return to_type(value, target)
        except BindingError as e:
            raise BindingError(
                f"{field}: {e}", field=field, value=value, target_type=target
            ) from e

    def _typed_or_default(self, key: int | str, target: Any) -> Any:
        if self.is_null(key):
            return default_for(target)
        return self._typed(key, target)

    def get_bool(self, key: int | str) -> bool:
        return self._typed(key, bool)

    def get_int(self, key: int | str) -> int:
        return self._typed(key, int)

    def get_float(self, key: int | str) -> float:
        return self._typed(key, float)

    def get_decimal(self, key: int | str) -> Decimal:
        return self._typed(key, Decimal)

    def get_str(self, key: int | str) -> str:
        return self._typed(key, str)

    def get_bytes(self, key: int | str) -> bytes:
        return self._typed(key, bytes)

    def get_datetime(self, key: int | str) -> datetime.datetime:
        return self._typed(key, datetime.datetime)

    def get_date(self, key: int | str) -> datetime.date:
        return self._typed(key, datetime.date)

    def get_time(self, key: int | str) -> datetime.time:
        return self._typed(key, datetime.time)

    def get_uuid(self, key: int | str) -> uuid.UUID:
        return self._typed(key, uuid.UUID)

    def get_char(self, key: int | str) -> str:
        return self._typed(key, Char)

    def get_bool_or_default(self, key: int | str) -> bool:
        return self._typed_or_default(key, bool)

    def get_int_or_default(self, key: int | str) -> int:
        return self._typed_or_default(key, int)

    def get_float_or_default(self, key: int | str) -> float:
        return self._typed_or_default(key, float)

    def get_decimal_or_default(self, key: int | str) -> Decimal:
        return self._typed_or_default(key, Decimal)

    def get_str_or_default(self, key: int | str) -> str | None:
        return self._typed_or_default(key, str)

    def get_bytes_or_default(self, key: int | str) -> bytes | None:
        return self._typed_or_default(key, bytes)

    def get_datetime_or_default(self, key: int | str) -> datetime.datetime:
        return self._typed_or_default(key, datetime.datetime)

    def get_date_or_default(self, key: int | str) -> datetime.date:
        return self._typed_or_default(key, datetime.date)

    def get_time_or_default(self, key: int | str) -> datetime.time:
        return self._typed_or_default(key, datetime.time)

    def get_uuid_or_default(self, key: int | str) -> uuid.UUID:
        return self._typed_or_default(key, uuid.UUID)

    def get_char_or_default(self, key: int | str) -> str:
        return self._typed_or_default(key, Char)
