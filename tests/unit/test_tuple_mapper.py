"""Unit tests for TupleMapper, ValueMapper and FunctionMapper."""

from __future__ import annotations

import datetime
from typing import NamedTuple

import pytest

from row_bind.core.exceptions import BindingError, FieldCountError, MappingError
from row_bind.mapping.converter import ValueConverter
from row_bind.mapping.tuples import TupleMapper, is_tuple_type
from row_bind.mapping.value import FunctionMapper, ValueMapper


class Pair(NamedTuple):
    key: str
    count: int


class TestTupleMapper:
    def test_int_datetime_scenario(self, make_record) -> None:
        mapper = TupleMapper(tuple[int, datetime.datetime])
        record = make_record(["a", "b"], [(1, "2018-04-02 08:30:01")])
        assert mapper.create_instance(record) == (1, datetime.datetime(2018, 4, 2, 8, 30, 1))

    def test_nullable_slots_keep_none(self, make_record) -> None:
        mapper = TupleMapper(tuple[int | None, datetime.datetime | None])
        assert mapper.create_instance(make_record(["a", "b"], [(None, None)])) == (None, None)

    def test_non_nullable_slots_default(self, make_record) -> None:
        mapper = TupleMapper(tuple[int, datetime.datetime])
        assert mapper.create_instance(make_record(["a", "b"], [(None, None)])) == (
            0,
            datetime.datetime.min,
        )

    def test_fewer_fields_than_arity(self, make_record) -> None:
        mapper = TupleMapper(tuple[int, str, float])
        with pytest.raises(FieldCountError, match=r"fewer fields \(2\) than the tuple type \(3\)"):
            mapper.create_instance(make_record(["a", "b"], [(1, "x")]))

    def test_field_count_error_is_value_error(self) -> None:
        error = FieldCountError(1, 2)
        assert isinstance(error, ValueError)
        assert (error.field_count, error.arity) == (1, 2)

    def test_extra_columns_ignored(self, make_record) -> None:
        mapper = TupleMapper(tuple[int])
        assert mapper.create_instance(make_record(["a", "b"], [("5", "ignored")])) == (5,)

    def test_named_tuple(self, make_record) -> None:
        mapper = TupleMapper(Pair)
        result = mapper.create_instance(make_record(["k", "n"], [("apples", "3")]))
        assert result == Pair("apples", 3)
        assert isinstance(result, Pair)

    def test_registry_converter_applied(self, make_record) -> None:
        converters = {str: ValueConverter(str, lambda v: f"<{v}>")}
        mapper = TupleMapper(tuple[str, int], converters)
        assert mapper.create_instance(make_record(["a", "b"], [("x", 1)])) == ("<x>", 1)

    def test_conversion_error_names_field(self, make_record) -> None:
        mapper = TupleMapper(tuple[int])
        with pytest.raises(BindingError) as excinfo:
            mapper.create_instance(make_record(["total"], [("abc",)]))
        assert excinfo.value.field == "total"

    @pytest.mark.parametrize("target", [tuple, tuple[int, ...], list[int], int])
    def test_rejects_invalid_types(self, target: object) -> None:
        with pytest.raises(MappingError):
            TupleMapper(target)

    def test_arity_and_element_types(self) -> None:
        mapper = TupleMapper(tuple[int, str])
        assert mapper.arity == 2
        assert mapper.element_types == (int, str)

    def test_is_tuple_type(self) -> None:
        assert is_tuple_type(tuple[int])
        assert is_tuple_type(Pair)
        assert not is_tuple_type(tuple)
        assert not is_tuple_type(list[int])


class TestValueMapper:
    def test_converts_first_column(self, make_record) -> None:
        mapper = ValueMapper(int)
        assert mapper.create_instance(make_record(["n", "other"], [("12", "x")])) == 12

    def test_null_defaults(self, make_record) -> None:
        assert ValueMapper(int).create_instance(make_record(["n"], [(None,)])) == 0
        assert ValueMapper(int | None).create_instance(make_record(["n"], [(None,)])) is None

    def test_no_columns(self, make_record) -> None:
        with pytest.raises(FieldCountError):
            ValueMapper(int).create_instance(make_record([], [()]))

    def test_entity_type(self) -> None:
        assert ValueMapper(str).entity_type is str


class TestFunctionMapper:
    def test_calls_function_with_record(self, make_record) -> None:
        mapper = FunctionMapper(str, lambda record: f"{record['first']} {record['last']}")
        assert mapper.create_instance(make_record(["first", "last"], [("Ann", "Lee")])) == "Ann Lee"
        assert mapper.entity_type is str
