"""Property descriptions and field bindings.

Frozen dataclasses describing the writable attributes of an entity type
and how each one binds to a record field. Descriptions are computed once
per type and cached.
"""

from __future__ import annotations

import dataclasses
import inspect
import sys
import typing
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from row_bind.core.enums import IgnoreBehavior, PopulationCondition


class _Missing:
    """Marks a property without a declared default."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def is_pydantic_model(cls: Any) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    from pydantic import BaseModel

    return isinstance(cls, type) and typing.get_origin(cls) is None and issubclass(cls, BaseModel)


@dataclass(frozen=True)
class PropertyInfo:
    """A writable attribute of an entity type."""

    name: str
    type: Any = Any
    default: Any = MISSING
    default_factory: Callable[[], Any] | None = None
    in_init: bool = False  # accepted by the constructor

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING or self.default_factory is not None

    def get_default(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return None if self.default is MISSING else self.default


@dataclass(frozen=True)
class PropertyBinding:
    """Binding of one entity property to one record field."""

    field: str
    prop: PropertyInfo
    condition: PopulationCondition = PopulationCondition.OPTIONAL
    from_db: Callable[[Any], Any] | None = None
    to_db: Callable[[Any], Any] | None = None
    ignored: bool = False
    ignore_behavior: IgnoreBehavior = IgnoreBehavior.BOTH

    @property
    def loads(self) -> bool:
        """True if the binding populates entities read from records."""
        return not self.ignored or self.ignore_behavior is IgnoreBehavior.ON_SAVE

    @property
    def saves(self) -> bool:
        """True if the binding is exposed when entities are written as rows."""
        return not self.ignored or self.ignore_behavior is IgnoreBehavior.ON_LOAD


def _resolve(annotation: Any, globalns: dict[str, Any], localns: dict[str, Any] | None) -> Any:
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, globalns, localns)  # noqa: S307
    except (NameError, AttributeError, TypeError, SyntaxError):
        return Any


def _type_hints(obj: Any) -> dict[str, Any]:
    """Resolved annotations of a class or function.

    An annotation that cannot be resolved, such as a name imported only
    under ``TYPE_CHECKING``, becomes ``Any`` without affecting the rest.
    """
    try:
        return typing.get_type_hints(obj)
    except (NameError, TypeError, AttributeError):
        pass

    hints: dict[str, Any] = {}
    if isinstance(obj, type):
        for owner in reversed(obj.__mro__):
            module = sys.modules.get(owner.__module__)
            globalns = vars(module) if module is not None else {}
            localns = dict(vars(owner))
            for name, annotation in inspect.get_annotations(owner).items():
                hints[name] = _resolve(annotation, globalns, localns)
    else:
        globalns = getattr(obj, "__globals__", {})
        for name, annotation in inspect.get_annotations(obj).items():
            hints[name] = _resolve(annotation, globalns, None)
    return hints


def _is_class_var(hint: Any) -> bool:
    return hint is typing.ClassVar or typing.get_origin(hint) is typing.ClassVar


def _describe_pydantic(cls: Any) -> tuple[PropertyInfo, ...]:
    props = []
    for name, info in cls.model_fields.items():
        required = info.is_required()
        props.append(
            PropertyInfo(
                name=name,
                type=info.annotation if info.annotation is not None else Any,
                default=MISSING if required or info.default_factory else info.default,
                default_factory=info.default_factory,  # type: ignore[arg-type]
                in_init=True,
            )
        )
    return tuple(props)


def _describe_dataclass(cls: Any) -> tuple[PropertyInfo, ...]:
    hints = _type_hints(cls)
    props = []
    for f in dataclasses.fields(cls):
        factory = f.default_factory if f.default_factory is not dataclasses.MISSING else None
        props.append(
            PropertyInfo(
                name=f.name,
                type=hints.get(f.name, Any),
                default=MISSING if f.default is dataclasses.MISSING else f.default,
                default_factory=factory,
                in_init=f.init,
            )
        )
    return tuple(props)


def _describe_plain(cls: Any) -> tuple[PropertyInfo, ...]:
    try:
        params = dict(inspect.signature(cls.__init__).parameters)  # type: ignore[misc]
    except (ValueError, TypeError):
        params = {}
    params.pop("self", None)
    params = {
        name: p
        for name, p in params.items()
        if p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
    }
    init_hints = _type_hints(cls.__init__) if params else {}

    found: dict[str, PropertyInfo] = {}
    for name, hint in _type_hints(cls).items():
        if name.startswith("_") or _is_class_var(hint):
            continue
        found[name] = PropertyInfo(
            name=name, type=hint, default=cls.__dict__.get(name, MISSING)
        )

    for name, attr in inspect.getmembers(cls, lambda a: isinstance(a, property)):
        if name.startswith("_") or attr.fset is None:
            continue
        found[name] = PropertyInfo(
            name=name, type=_type_hints(attr.fget).get("return", Any)
        )

    for name, param in params.items():
        default = MISSING if param.default is param.empty else param.default
        current = found.get(name)
        hint = current.type if current is not None else init_hints.get(name, Any)
        found[name] = PropertyInfo(name=name, type=hint, default=default, in_init=True)

    return tuple(found.values())


@lru_cache(maxsize=None)
def describe_properties(entity_type: type) -> tuple[PropertyInfo, ...]:
    """Describe the writable attributes of *entity_type*.

    Pydantic models use ``model_fields``, dataclasses their fields, plain
    classes their annotated attributes, settable properties and
    constructor parameters.
    """
    if is_pydantic_model(entity_type):
        return _describe_pydantic(entity_type)
    if dataclasses.is_dataclass(entity_type):
        return _describe_dataclass(entity_type)
    return _describe_plain(entity_type)
