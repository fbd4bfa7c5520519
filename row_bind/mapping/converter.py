"""Conversion of raw database values into typed Python values.

Conversion runs an ordered chain of rules. Null values short-circuit to
``None`` and ``X | None`` targets are unwrapped before the chain runs. The
first rule whose predicate accepts the value and target converts it:

1. ``Enum`` targets: member by name (exact, then case-insensitive) or value.
2. ``UUID`` targets: parsed from strings or 16 raw bytes.
3. ``Char`` targets: first character; empty strings become ``None``.
4. ``str`` targets given a non-text scalar: ISO 8601 for dates and times,
   member name for enums, ``str()`` otherwise.
5. Complex targets given a JSON-shaped string: parsed with pydantic.
6. Everything else: pydantic lax validation against the target type.

``to_type`` then replaces ``None`` with the type default for non-nullable
value types (``0``, ``False``, ``datetime.min``...).
"""

from __future__ import annotations

import datetime
import enum
import types
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Any, Generic, NewType, Optional, TypeVar, Union, get_args, get_origin

from pydantic import ConfigDict, TypeAdapter, ValidationError

from row_bind.core.exceptions import BindingError

T = TypeVar("T")

Char = NewType("Char", str)
"""A single character, the counterpart of fixed-length ``CHAR(1)`` columns."""

_NoneType = type(None)


class _DBNullType:
    """Null marker for rows that distinguish SQL NULL from a missing value."""

    _instance: _DBNullType | None = None

    def __new__(cls) -> _DBNullType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DBNull"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "DBNull"


DBNull = _DBNullType()

SCALAR_TYPES: frozenset[Any] = frozenset(
    {
        bool,
        int,
        float,
        Decimal,
        datetime.datetime,
        datetime.date,
        datetime.time,
        uuid.UUID,
        Char,
        str,
        bytes,
    }
)

# str and bytes are left out: a null string stays None.
_VALUE_DEFAULTS: dict[Any, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    Decimal: Decimal(0),
    datetime.datetime: datetime.datetime.min,
    datetime.date: datetime.date.min,
    datetime.time: datetime.time.min,
    uuid.UUID: uuid.UUID(int=0),
    Char: "\x00",
}


def is_null(value: Any) -> bool:
    """Return True for ``None`` and the ``DBNull`` marker."""
    return value is None or value is DBNull


def is_nullable(target: Any) -> bool:
    """Return True if *target* is ``X | None`` / ``Optional[X]``."""
    if get_origin(target) in (Union, types.UnionType):
        return _NoneType in get_args(target)
    return False


def unwrap_nullable(target: Any) -> Any:
    """Strip ``None`` from a union type; other types are returned unchanged."""
    if not is_nullable(target):
        return target
    args = tuple(arg for arg in get_args(target) if arg is not _NoneType)
    if len(args) == 1:
        return args[0]
    return Union[args]  # noqa: UP007


def type_key(target: Any) -> Any:
    """Canonical dictionary key for a type, so ``int | None == Optional[int]``."""
    if is_nullable(target):
        return Optional[unwrap_nullable(target)]  # noqa: UP007
    return target


def is_enum_type(target: Any) -> bool:
    return (
        isinstance(target, type)
        and get_origin(target) is None
        and issubclass(target, enum.Enum)
    )


def type_name(target: Any) -> str:
    if isinstance(target, (type, NewType)):
        return target.__name__
    return repr(target)


def default_for(target: Any) -> Any:
    """Value a non-nullable slot of type *target* receives for a null value."""
    if is_nullable(target):
        return None
    if is_enum_type(target):
        members = list(target)
        zero = next((m for m in members if m.value == 0), None)
        if zero is not None:
            return zero
        return members[0] if members else None
    try:
        return _VALUE_DEFAULTS.get(target)
    except TypeError:
        return None


# --- Rules ---


@dataclass(frozen=True)
class ConversionRule:
    """One step of the conversion chain."""

    name: str
    applies: Callable[[Any, Any], bool]
    convert: Callable[[Any, Any], Any]


def _convert_enum(value: Any, target: Any) -> Any:
    if isinstance(value, target):
        return value
    if isinstance(value, str):
        if value == "":
            return None
        if value in target.__members__:
            return target[value]
        folded = value.casefold()
        for name, member in target.__members__.items():
            if name.casefold() == folded:
                return member
        # Numeric text from a character column
        text = value.strip()
        if text.lstrip("-").isdigit():
            try:
                return target(int(text))
            except ValueError:
                pass
    try:
        return target(value)
    except (ValueError, TypeError):
        pass
    raise BindingError(
        f"Value could not be parsed as {target.__name__}: {value!r}",
        value=value,
        target_type=target,
    )


def _convert_uuid(value: Any, target: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, (bytes, bytearray)) and len(value) == 16:
        return uuid.UUID(bytes=bytes(value))
    text = str(value)
    if text == "":
        return None
    try:
        return uuid.UUID(text)
    except ValueError as e:
        raise BindingError(
            f"Value could not be parsed as UUID: {value!r}",
            value=value,
            target_type=target,
        ) from e


def _convert_char(value: Any, target: Any) -> Any:
    # Fixed-length char columns can hold an empty value, which has no
    # single-character form.
    text = str(value)
    return text[0] if text else None


def _is_complex(target: Any) -> bool:
    if target is Any or target is object:
        return False
    try:
        if target in SCALAR_TYPES:
            return False
    except TypeError:
        return True
    return not is_enum_type(target)


def _looks_like_json(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    text = value.strip()
    return (
        text == ""
        or (text.startswith("{") and text.endswith("}"))
        or (text.startswith("[") and text.endswith("]"))
    )


_TEMPORAL_TYPES = (datetime.date, datetime.time)
_STRINGIFIED_TYPES = (*_TEMPORAL_TYPES, uuid.UUID, Decimal, int, float, enum.Enum)


def _is_stringified(value: Any, target: Any) -> bool:
    return target is str and isinstance(value, _STRINGIFIED_TYPES) and not isinstance(value, str)


def _convert_str(value: Any, target: Any) -> Any:
    if isinstance(value, _TEMPORAL_TYPES):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.name
    return str(value)


_STR_CONFIG = ConfigDict(coerce_numbers_to_str=True)


@lru_cache(maxsize=512)
def _type_adapter(target: Any) -> TypeAdapter[Any]:
    if target is str:
        return TypeAdapter(str, config=_STR_CONFIG)
    return TypeAdapter(target)


def _convert_json(value: Any, target: Any) -> Any:
    if value.strip() == "":
        return None
    try:
        return _type_adapter(target).validate_json(value)
    except ValidationError as e:
        raise BindingError(
            f"JSON value could not be converted to {type_name(target)}: {value!r}",
            value=value,
            target_type=target,
        ) from e


def _convert_default(value: Any, target: Any) -> Any:
    if isinstance(target, type) and type(value) is target:
        return value
    try:
        return _type_adapter(target).validate_python(value)
    except ValidationError as e:
        raise BindingError(
            f"Value could not be converted to {type_name(target)}: {value!r}",
            value=value,
            target_type=target,
        ) from e


CONVERSION_RULES: tuple[ConversionRule, ...] = (
    ConversionRule("enum", lambda value, target: is_enum_type(target), _convert_enum),
    ConversionRule("uuid", lambda value, target: target is uuid.UUID, _convert_uuid),
    ConversionRule("char", lambda value, target: target is Char, _convert_char),
    ConversionRule("str", _is_stringified, _convert_str),
    ConversionRule(
        "json",
        lambda value, target: _is_complex(target) and _looks_like_json(value),
        _convert_json,
    ),
    ConversionRule("default", lambda value, target: True, _convert_default),
)


def convert_value(value: Any, target: Any) -> Any:
    """Convert *value* to *target*, returning ``None`` for null results.

    Raises:
        BindingError: If the value cannot be represented as *target*.
    """
    if is_null(value):
        return None
    base = unwrap_nullable(target)
    for rule in CONVERSION_RULES:
        if rule.applies(value, base):
            return rule.convert(value, base)
    return value


def to_type(value: Any, target: Any) -> Any:
    """Convert *value* to *target*, substituting the type default for nulls."""
    result = convert_value(value, target)
    if result is None:
        return default_for(target)
    return result


def find_value_converter(
    converters: Mapping[Any, ValueConverter[Any]], target: Any
) -> ValueConverter[Any] | None:
    """Look up a custom converter by exact type, then by the unwrapped type."""
    if not converters:
        return None
    converter = converters.get(type_key(target))
    if converter is None and is_nullable(target):
        converter = converters.get(unwrap_nullable(target))
    return converter


class ValueConverter(Generic[T]):
    """Custom conversion from a stored value to ``value_type``.

    Registered per type on a ``MapperRegistry`` and used by property and
    tuple mappers in place of the standard conversion.
    """

    def __init__(self, value_type: Any, conversion: Callable[[Any], T]) -> None:
        self.value_type = value_type
        self._conversion = conversion

    def convert(self, value: Any) -> T:
        return self._conversion(value)

    def __call__(self, value: Any) -> T:
        return self._conversion(value)

    def __repr__(self) -> str:
        return f"ValueConverter({type_name(self.value_type)})"
