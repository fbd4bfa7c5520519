"""SQL parameter handling.

Converts `:name` parameter syntax to driver-specific format, decides
whether a command is ad hoc SQL or a stored procedure name, and turns
the accepted parameter shapes into something a DB-API driver binds.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

# Matches :name but not ::typecast and not inside words
# Negative lookbehind for : (handles ::), \w (handles mid-word colons)
_PARAM_PATTERN = re.compile(r"(?<![:\w]):([a-zA-Z_]\w*)")

# Matches single-quoted string literals (with escaped quotes handled)
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'")

# Value types bound positionally when passed on their own
_SCALARS = (str, bytes, bytearray, int, float, bool)


def normalize_params(sql: str, paramstyle: str) -> str:
    """Convert :name parameters to the target param style.

    Args:
        sql: SQL string with :name parameters.
        paramstyle: Target style - 'named' (no conversion) or 'pyformat' (%(name)s).

    Returns:
        SQL with parameters converted to the target style.
    """
    if paramstyle == "named":
        return sql
    return _convert_to_pyformat(sql)


@lru_cache(maxsize=256)
def _convert_to_pyformat(sql: str) -> str:
    """Convert :name params to %(name)s, preserving string literals."""
    parts: list[str] = []
    last_end = 0

    for match in _STRING_LITERAL_PATTERN.finditer(sql):
        start, end = match.span()
        if start > last_end:
            parts.append(_PARAM_PATTERN.sub(r"%(\1)s", sql[last_end:start]))
        parts.append(match.group())
        last_end = end

    if last_end < len(sql):
        parts.append(_PARAM_PATTERN.sub(r"%(\1)s", sql[last_end:]))

    return "".join(parts)


def is_raw_sql(command: str) -> bool:
    """Return True if *command* is ad hoc SQL rather than a stored procedure name.

    Procedure names never contain whitespace; any SQL statement contains
    at least one space.
    """
    return any(c.isspace() for c in command)


def parameter_name(name: str) -> str:
    """Strip a leading ``@`` or ``:`` marker from a parameter name."""
    return name.lstrip("@:")


def _object_params(obj: Any) -> dict[str, Any]:
    if hasattr(obj, "model_dump"):
        return dict(obj.model_dump())
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    return {name: value for name, value in vars(obj).items() if not name.startswith("_")}


def coerce_params(params: Any) -> dict[str, Any] | tuple[Any, ...] | None:
    """Normalize *params* to a dict, tuple, or None.

    * ``None`` -> ``None``.
    * mapping -> dict, names stripped of ``@``/``:``.
    * sequence of ``(name, value)`` pairs -> dict.
    * other ``tuple`` / ``list`` -> ``tuple`` (positional binding).
    * dataclass, pydantic model or plain object -> dict of its attributes.
    * any other scalar -> single-element tuple.
    """
    if params is None:
        return None
    if isinstance(params, Mapping):
        return {parameter_name(str(k)): v for k, v in params.items()}
    if isinstance(params, (tuple, list)):
        if params and all(
            isinstance(item, tuple) and len(item) == 2 and isinstance(item[0], str)
            for item in params
        ):
            return {parameter_name(name): value for name, value in params}
        return tuple(params)
    if isinstance(params, _SCALARS):
        return (params,)
    if hasattr(params, "model_dump") or dataclasses.is_dataclass(params) or hasattr(params, "__dict__"):
        return _object_params(params)
    return (params,)
