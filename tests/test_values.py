import math

import pytest

from ghaflow.expr.parser import CompareKind
from ghaflow.expr.values import (
    EvaluationError,
    coerce_to_number,
    coerce_to_string,
    compare_values,
    is_number,
    is_truthy,
    safe_value,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, False),
        (-10, True),
        (0, False),
        (3.14, True),
        ("", False),
        ("abc", True),
        ({}, True),
        ([], True),
        (math.nan, False),
        (0.0, False),
        (True, True),
        (False, False),
    ],
)
def test_is_truthy(value, expected):
    assert is_truthy(value) is expected


def test_is_truthy_of_plain_object_is_false():
    assert is_truthy(object()) is False


@pytest.mark.parametrize(
    "value, expected",
    [(1, True), (1.5, True), (True, False), ("1", False), (None, False)],
)
def test_is_number(value, expected):
    assert is_number(value) is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        (True, "true"),
        (False, "false"),
        ("abc", "abc"),
        (123, "123"),
        (-3.14, "-3.14"),
        (math.nan, "NaN"),
        (math.inf, "Infinity"),
        (-math.inf, "-Infinity"),
        ([0, True, "abc"], "Array"),
        ({"a": 1}, "Object"),
    ],
)
def test_coerce_to_string(value, expected):
    assert coerce_to_string(value) == expected


def test_coerce_to_string_uses_exponent_for_large_floats():
    assert coerce_to_string(1e6) == "1e+06"


def test_coerce_to_string_whole_float_has_no_fraction():
    assert coerce_to_string(float(123)) == "123"


@pytest.mark.parametrize(
    "value, expected",
    [(None, 0), (True, 1), (False, 0), ("", 0), ("3", 3), ("-9.7", -9.7)],
)
def test_coerce_to_number(value, expected):
    assert coerce_to_number(value) == expected


def test_coerce_infinity_string():
    assert coerce_to_number("Infinity") == math.inf


@pytest.mark.parametrize("value", ["abc", "true", [], {}, 5, "1 +"])
def test_coerce_to_number_gives_nan(value):
    result = coerce_to_number(value)
    assert str(result) == "nan"


def test_coerce_to_number_uses_evaluate():
    assert coerce_to_number("anything", lambda text: 7) == 7


def test_coerce_to_number_evaluate_error_gives_nan():
    def failing(text):
        raise EvaluationError("Unavailable context: anything")

    result = coerce_to_number("anything", failing)
    assert str(result) == "nan"


def test_coerce_to_number_non_numeric_result_gives_nan():
    result = coerce_to_number("anything", lambda text: "x")
    assert str(result) == "nan"


@pytest.mark.parametrize(
    "left, right, kind, expected",
    [
        (None, 0, CompareKind.EQ, True),
        (True, 1, CompareKind.EQ, True),
        ("", 0, CompareKind.EQ, True),
        ("3", 3, CompareKind.EQ, True),
        (0, None, CompareKind.EQ, True),
        (1, True, CompareKind.EQ, True),
        (3, "3", CompareKind.EQ, True),
        ("TEST", "test", CompareKind.EQ, True),
        (True, False, CompareKind.GREATER, True),
        (True, False, CompareKind.GREATER_EQ, True),
        (True, True, CompareKind.GREATER_EQ, True),
        (True, False, CompareKind.NOT_EQ, True),
        ({}, 2, CompareKind.LESS, False),
        ({}, [], CompareKind.LESS, False),
        ({}, [], CompareKind.GREATER, False),
        (1, 2, CompareKind.LESS, True),
        ("b", "a", CompareKind.LESS_EQ, False),
        ("b", "a", CompareKind.GREATER_EQ, True),
        ("a", "a", CompareKind.NOT_EQ, False),
        (None, None, CompareKind.EQ, True),
        (3, 3.0, CompareKind.EQ, True),
    ],
)
def test_compare_values(left, right, kind, expected):
    assert compare_values(left, right, kind) is expected


def test_compare_nan_is_only_not_equal():
    for kind in CompareKind:
        assert compare_values(math.nan, math.nan, kind) is (kind is CompareKind.NOT_EQ)


def test_compare_maps_raises():
    with pytest.raises(EvaluationError) as info:
        compare_values({"a": "b"}, {}, CompareKind.NOT_EQ)
    assert str(info.value) == "Compare not implemented for types: left: map, right: map"


def test_compare_uses_evaluate_for_strings():
    assert compare_values("anything", 7, CompareKind.EQ, lambda text: 7) is True


def test_safe_value_turns_float_zero_into_int():
    result = safe_value(0.0)
    assert result == 0 and isinstance(result, int)
    assert isinstance(safe_value(-0.0), int)


@pytest.mark.parametrize("value", [None, 3.14, "abc", -10, [1], math.inf])
def test_safe_value_keeps_other_values(value):
    assert safe_value(value) is value