"""Property mapper: binds record fields to entity attributes by name.

Build one with ``PropertyMapperBuilder`` (or ``MapperRegistry.configure``),
adjust field names, conditions and converters fluently, then ``build()``
it into an immutable ``PropertyMapper``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

from row_bind.core.enums import IgnoreBehavior, PopulationCondition
from row_bind.core.exceptions import BindingError, MappingError
from row_bind.mapping.binding import (
    PropertyBinding,
    PropertyInfo,
    describe_properties,
    is_pydantic_model,
)
from row_bind.mapping.converter import (
    ValueConverter,
    default_for,
    find_value_converter,
    is_null,
    to_type,
    type_name,
)
from row_bind.mapping.record import Record

T = TypeVar("T")

AfterBinding = Callable[[Record, Any], None]

__all__ = [
    "PropertyBinding",
    "PropertyInfo",
    "PropertyMapper",
    "PropertyMapperBuilder",
    "describe_properties",
]


class PropertyMapper(Generic[T]):
    """Creates entities by assigning record fields to attributes.

    Args:
        entity_type: The class to construct.
        bindings: Field bindings, in assignment order.
        after_binding: Callback run with ``(record, instance)`` after all
            attributes are set.
        value_converters: Per-type converter table, usually the owning
            registry's; consulted when a binding has no ``from_db``.
    """

    def __init__(
        self,
        entity_type: type[T],
        bindings: tuple[PropertyBinding, ...],
        after_binding: AfterBinding | None = None,
        value_converters: Mapping[Any, ValueConverter[Any]] | None = None,
    ) -> None:
        self._entity_type = entity_type
        self._bindings = tuple(bindings)
        self._load_bindings = tuple(b for b in self._bindings if b.loads)
        self._save_bindings = tuple(b for b in self._bindings if b.saves)
        self._after_binding = after_binding
        self._value_converters = value_converters if value_converters is not None else {}
        self._properties = describe_properties(entity_type)
        self._is_pydantic = is_pydantic_model(entity_type)

    @property
    def entity_type(self) -> type[T]:
        return self._entity_type

    @property
    def bindings(self) -> tuple[PropertyBinding, ...]:
        return self._bindings

    @property
    def load_bindings(self) -> tuple[PropertyBinding, ...]:
        """Bindings used when populating entities (not ignored, or ignored on save)."""
        return self._load_bindings

    @property
    def save_bindings(self) -> tuple[PropertyBinding, ...]:
        """Bindings exposed when writing entities (not ignored, or ignored on load)."""
        return self._save_bindings

    def get_binding(self, name: str) -> PropertyBinding | None:
        """Binding for the named property, if any."""
        for binding in self._bindings:
            if binding.prop.name == name:
                return binding
        return None

    def create_instance(self, record: Record) -> T:
        values: dict[str, Any] = {}
        for binding in self._load_bindings:
            field = binding.field
            present = record.has_field(field)
            if binding.condition is PopulationCondition.REQUIRED and not present:
                raise BindingError(
                    f"A required field was not found in the data record: {field}",
                    field=field,
                    target_type=binding.prop.type,
                )
            raw = record.get_value(field) if present else None
            value = None if is_null(raw) else raw
            if binding.condition is PopulationCondition.NOT_NULL and value is None:
                raise BindingError(
                    f"The value of {field} may not be null.",
                    field=field,
                    target_type=binding.prop.type,
                )
            if not present:
                continue
            values[binding.prop.name] = self._convert(binding, value)

        instance = self._construct(values)
        if self._after_binding is not None:
            self._after_binding(record, instance)
        return instance

    def _convert(self, binding: PropertyBinding, value: Any) -> Any:
        target = binding.prop.type
        try:
            if binding.from_db is not None:
                return binding.from_db(value)
            converter = find_value_converter(self._value_converters, target)
            if converter is not None:
                return converter(value)
            return to_type(value, target)
        except (BindingError, TypeError, ValueError) as e:
            raise BindingError(
                f"{binding.field}: {e}",
                field=binding.field,
                value=value,
                target_type=target,
            ) from e

    def _construct(self, values: dict[str, Any]) -> T:
        cls: Any = self._entity_type
        if self._is_pydantic:
            for prop in self._properties:
                if prop.name not in values and not prop.has_default:
                    values[prop.name] = default_for(prop.type)
            return cls.model_construct(**values)  # type: ignore[no-any-return]

        kwargs: dict[str, Any] = {}
        for prop in self._properties:
            if not prop.in_init:
                continue
            if prop.name in values:
                kwargs[prop.name] = values.pop(prop.name)
            elif not prop.has_default:
                kwargs[prop.name] = default_for(prop.type)

        try:
            instance = cls(**kwargs)
        except (TypeError, ValueError) as e:
            raise BindingError(
                f"Could not construct {type_name(cls)}: {e}", target_type=cls
            ) from e

        # Attributes the constructor left unset get the null default
        for prop in self._properties:
            if prop.in_init or prop.has_default or prop.name in values:
                continue
            if not hasattr(instance, prop.name):
                values[prop.name] = default_for(prop.type)

        frozen = dataclasses.is_dataclass(cls) and cls.__dataclass_params__.frozen
        for name, value in values.items():
            if frozen:
                object.__setattr__(instance, name, value)
            else:
                setattr(instance, name, value)
        return instance  # type: ignore[no-any-return]

    def __repr__(self) -> str:
        fields = ", ".join(f"{b.prop.name}<-{b.field}" for b in self._bindings)
        return f"PropertyMapper({type_name(self._entity_type)}: {fields})"


class PropertyMapperBuilder(Generic[T]):
    """Fluent configuration for a ``PropertyMapper``.

    Every writable attribute starts bound to a field of its own name with
    ``default_condition``. Configuration is only allowed until ``build()``.

    Args:
        entity_type: The class to map.
        default_condition: Condition given to the default bindings.
        value_converters: Per-type converter table handed to the mapper.
    """

    def __init__(
        self,
        entity_type: type[T],
        default_condition: PopulationCondition = PopulationCondition.OPTIONAL,
        value_converters: Mapping[Any, ValueConverter[Any]] | None = None,
    ) -> None:
        self._entity_type = entity_type
        self._value_converters = value_converters
        self._properties = {p.name: p for p in describe_properties(entity_type)}
        self._bindings: dict[str, PropertyBinding] = {
            name: PropertyBinding(field=name, prop=prop, condition=default_condition)
            for name, prop in self._properties.items()
        }
        self._after_binding: AfterBinding | None = None
        self._mapper: PropertyMapper[T] | None = None

    @property
    def entity_type(self) -> type[T]:
        return self._entity_type

    @property
    def is_built(self) -> bool:
        return self._mapper is not None

    def _check_open(self) -> None:
        if self._mapper is not None:
            raise MappingError(
                f"The mapper for {type_name(self._entity_type)} has already been built"
            )

    def _property(self, name: str) -> PropertyInfo:
        try:
            return self._properties[name]
        except KeyError:
            raise MappingError(
                f"{type_name(self._entity_type)} has no writable property '{name}'"
            ) from None

    def _binding(self, name: str) -> PropertyBinding:
        self._property(name)
        binding = self._bindings.get(name)
        if binding is None:
            raise MappingError(f"Property '{name}' is not mapped to a field")
        return binding

    # --- Field mapping ---

    def map(
        self,
        name: str,
        field: str | None = None,
        *,
        condition: PopulationCondition | None = None,
        from_db: Callable[[Any], Any] | None = None,
        to_db: Callable[[Any], Any] | None = None,
    ) -> PropertyMapperBuilder[T]:
        """Bind property *name* to *field* (defaults to the property name)."""
        self._check_open()
        prop = self._property(name)
        field = field or name
        for other_name, other in self._bindings.items():
            if other_name != name and other.field.lower() == field.lower():
                raise MappingError(f"Field cannot be mapped to more than one property: {field}")

        current = self._bindings.get(name)
        if condition is None:
            condition = current.condition if current else PopulationCondition.OPTIONAL
        self._bindings[name] = PropertyBinding(
            field=field,
            prop=prop,
            condition=condition,
            from_db=from_db,
            to_db=to_db,
        )
        return self

    def map_optional(self, name: str, field: str | None = None, **kwargs: Any) -> PropertyMapperBuilder[T]:
        return self.map(name, field, condition=PopulationCondition.OPTIONAL, **kwargs)

    def map_required(self, name: str, field: str | None = None, **kwargs: Any) -> PropertyMapperBuilder[T]:
        return self.map(name, field, condition=PopulationCondition.REQUIRED, **kwargs)

    def map_not_null(self, name: str, field: str | None = None, **kwargs: Any) -> PropertyMapperBuilder[T]:
        return self.map(name, field, condition=PopulationCondition.NOT_NULL, **kwargs)

    # --- Conditions ---

    def _set_condition(self, names: tuple[str, ...], condition: PopulationCondition) -> PropertyMapperBuilder[T]:
        self._check_open()
        for name in names:
            binding = self._binding(name)
            self._bindings[name] = dataclasses.replace(binding, condition=condition, ignored=False)
        return self

    def optional(self, *names: str) -> PropertyMapperBuilder[T]:
        return self._set_condition(names, PopulationCondition.OPTIONAL)

    def required(self, *names: str) -> PropertyMapperBuilder[T]:
        return self._set_condition(names, PopulationCondition.REQUIRED)

    def not_null(self, *names: str) -> PropertyMapperBuilder[T]:
        return self._set_condition(names, PopulationCondition.NOT_NULL)

    # --- Ignoring ---

    def ignore(self, *names: str, behavior: IgnoreBehavior = IgnoreBehavior.BOTH) -> PropertyMapperBuilder[T]:
        """Skip properties on load, on save, or both."""
        self._check_open()
        for name in names:
            binding = self._binding(name)
            self._bindings[name] = dataclasses.replace(binding, ignored=True, ignore_behavior=behavior)
        return self

    def ignore_on_load(self, *names: str) -> PropertyMapperBuilder[T]:
        return self.ignore(*names, behavior=IgnoreBehavior.ON_LOAD)

    def ignore_on_save(self, *names: str) -> PropertyMapperBuilder[T]:
        return self.ignore(*names, behavior=IgnoreBehavior.ON_SAVE)

    def after_binding(self, callback: AfterBinding) -> PropertyMapperBuilder[T]:
        """Run *callback* with ``(record, instance)`` after each instance is populated."""
        self._check_open()
        self._after_binding = callback
        return self

    def build(self) -> PropertyMapper[T]:
        """Freeze the configuration. Later calls return the same mapper."""
        if self._mapper is None:
            self._mapper = PropertyMapper(
                self._entity_type,
                tuple(self._bindings.values()),
                after_binding=self._after_binding,
                value_converters=self._value_converters,
            )
        return self._mapper
