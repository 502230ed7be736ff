"""Truthiness, coercion and comparison of expression values."""

from __future__ import annotations

import math
import operator
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from .parser import (
    BoolNode,
    CompareKind,
    FloatNode,
    IntNode,
    NullNode,
    StringNode,
    VariableNode,
    parse_expression,
)

Evaluate = Callable[[str], Any]

_OPERATORS = {
    CompareKind.LESS: operator.lt,
    CompareKind.LESS_EQ: operator.le,
    CompareKind.GREATER: operator.gt,
    CompareKind.GREATER_EQ: operator.ge,
    CompareKind.EQ: operator.eq,
    CompareKind.NOT_EQ: operator.ne,
}


class EvaluationError(Exception):
    """Raised when an expression cannot be evaluated."""


def _kind(value: Any) -> str:
    if value is None:
        return "invalid"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, str):
        return "string"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float64"
    if isinstance(value, (list, tuple)):
        return "slice"
    if isinstance(value, Mapping):
        return "map"
    return "struct"


def is_number(value: Any) -> bool:
    """Return True for ints and floats, but not booleans."""
    return _kind(value) in ("int", "float64")


def is_truthy(value: Any) -> bool:
    """Return the truth of ``value`` under expression rules."""
    kind = _kind(value)
    if kind == "bool":
        return value
    if kind == "string":
        return value != ""
    if kind == "int":
        return value != 0
    if kind == "float64":
        return not math.isnan(value) and value != 0
    return kind in ("map", "slice")


def _format_float(value: float) -> str:
    """Render a float with the shortest digits, switching to exponent form."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(map(str, digit_tuple))
    count = len(digits)
    point = count + exponent
    exp10 = point - 1
    prefix = "-" if sign else ""
    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + ("." + digits[1:] if count > 1 else "")
        exp_sign = "-" if exp10 < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(exp10):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= count:
        return f"{prefix}{digits}{'0' * (point - count)}"
    return f"{prefix}{digits[:point]}.{digits[point:]}"


def coerce_to_string(value: Any) -> str:
    """Convert ``value`` to the string form used by expression functions."""
    kind = _kind(value)
    if kind == "invalid":
        return ""
    if kind == "bool":
        return "true" if value else "false"
    if kind == "string":
        return value
    if kind == "int":
        return str(int(value))
    if kind == "float64":
        if value == math.inf:
            return "Infinity"
        if value == -math.inf:
            return "-Infinity"
        return _format_float(value)
    if kind == "slice":
        return "Array"
    if kind == "map":
        return "Object"
    return str(value)


def _evaluate_literal(text: str) -> Any:
    """Evaluate text that holds a literal or the Infinity/NaN constants."""
    node = parse_expression(text)
    if isinstance(node, (BoolNode, IntNode, FloatNode, StringNode, NullNode)):
        return node.value
    if isinstance(node, VariableNode):
        name = node.name.lower()
        if name == "infinity":
            return math.inf
        if name == "nan":
            return math.nan
        raise EvaluationError(f"Unavailable context: {node.name}")
    raise EvaluationError(f"Not a literal: {text}")


def coerce_to_number(value: Any, evaluate: Evaluate | None = None) -> int | float:
    """Convert ``value`` to a number; NaN when it has no numeric meaning.

    Non-empty strings are evaluated as expressions with ``evaluate``; by
    default only literals and the Infinity/NaN constants are understood.
    """
    kind = _kind(value)
    if kind == "invalid":
        return 0
    if kind == "bool":
        return 1 if value else 0
    if kind == "string":
        if value == "":
            return 0
        try:
            evaluated = (evaluate or _evaluate_literal)(value)
        except Exception:
            return math.nan
        if is_number(evaluated):
            return evaluated
    return math.nan


def compare_values(
    left: Any, right: Any, kind: CompareKind, evaluate: Evaluate | None = None
) -> bool:
    """Compare two values, coercing to numbers when their types differ.

    Strings compare case-insensitively. Raises EvaluationError for types
    that cannot be compared.
    """
    if _kind(left) != _kind(right):
        if not is_number(left):
            left = coerce_to_number(left, evaluate)
        if not is_number(right):
            right = coerce_to_number(right, evaluate)

    compare = _OPERATORS[kind]
    left_kind = _kind(left)
    if left_kind == "bool":
        return compare(int(left), int(right))
    if left_kind == "string":
        return compare(left.lower(), right.lower())
    if left_kind in ("int", "float64"):
        return compare(float(left), float(right))
    if left_kind == "invalid":
        if right is None:
            return True
        raise EvaluationError(
            f"Compare params of Invalid type: left: {left_kind}, right: {_kind(right)}"
        )
    raise EvaluationError(
        f"Compare not implemented for types: left: {left_kind}, right: {_kind(right)}"
    )


def safe_value(value: Any) -> Any:
    """Return ``value``, turning a floating zero into the integer 0."""
    if isinstance(value, float) and value == 0:
        return 0
    return value