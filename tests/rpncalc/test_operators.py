"""
Tests for the operator table and built-in functions.
"""

import math

import pytest

from rpncalc import (
    BUILTIN_FUNCTIONS,
    DEFAULT_OPERATORS,
    Associativity,
    ErrorKind,
    EvaluationError,
    Operator,
    call_builtin,
    is_builtin_function,
    power,
    with_power_associativity,
)


class TestOperatorTable:
    """Tests for the default operator table."""

    @pytest.mark.parametrize(
        "operator, precedence",
        [
            (Operator.ADD, 1),
            (Operator.SUBTRACT, 1),
            (Operator.MULTIPLY, 2),
            (Operator.DIVIDE, 2),
            (Operator.POWER, 3),
        ],
    )
    def test_binary_operator_precedence(self, operator, precedence):
        spec = DEFAULT_OPERATORS[operator]
        assert spec.precedence == precedence
        assert spec.arity == 2
        assert spec.associativity == Associativity.LEFT

    def test_negate_is_unary(self):
        spec = DEFAULT_OPERATORS[Operator.NEGATE]
        assert spec.arity == 1
        assert spec.apply(2.5) == -2.5

    def test_operator_symbols(self):
        assert Operator.POWER.symbol == "^"
        assert Operator.NEGATE.symbol == "-"

    def test_with_power_associativity_copies_table(self):
        table = with_power_associativity(Associativity.RIGHT)
        assert table[Operator.POWER].associativity == Associativity.RIGHT
        assert table[Operator.POWER].precedence == 3
        assert DEFAULT_OPERATORS[Operator.POWER].associativity == Associativity.LEFT


class TestPower:
    """Tests for IEEE 754 style exponentiation."""

    def test_regular_values(self):
        assert power(2, 3) == 8.0
        assert power(9, 0.5) == 3.0
        assert power(2, -2) == 0.25

    def test_negative_base_with_integer_exponent(self):
        assert power(-2, 3) == -8.0

    def test_negative_base_with_fractional_exponent_is_nan(self):
        assert math.isnan(power(-8, 1 / 3))

    def test_zero_to_negative_power(self):
        assert power(0.0, -2) == math.inf
        assert power(-0.0, -3) == -math.inf

    def test_overflow_keeps_sign(self):
        assert power(10, 400) == math.inf
        assert power(-10, 401) == -math.inf
        assert power(-10, 400) == math.inf

    def test_zero_to_zero_is_one(self):
        assert power(0, 0) == 1.0


class TestBuiltins:
    """Tests for the built-in function registry."""

    def test_registry_contents(self):
        assert set(BUILTIN_FUNCTIONS) == {"sin", "cos", "tan", "sqrt", "abs"}
        assert all(spec.arity == 1 for spec in BUILTIN_FUNCTIONS.values())

    def test_is_builtin_function(self):
        assert is_builtin_function("sqrt")
        assert not is_builtin_function("x")

    def test_call_builtin(self):
        assert call_builtin("abs", [-4.0]) == 4.0
        assert call_builtin("sin", [math.pi / 2]) == 1.0

    def test_domain_errors_produce_nan(self):
        assert math.isnan(call_builtin("sqrt", [-4.0]))
        assert math.isnan(call_builtin("sin", [math.inf]))

    def test_throws_on_unknown_function(self):
        with pytest.raises(EvaluationError) as exc_info:
            call_builtin("log", [1.0], position=3)
        assert exc_info.value.kind == ErrorKind.UNKNOWN_TOKEN
        assert exc_info.value.position == 3

    def test_throws_on_wrong_argument_count(self):
        with pytest.raises(EvaluationError) as exc_info:
            call_builtin("cos", [])
        assert exc_info.value.kind == ErrorKind.MISSING_FUNCTION_ARGUMENT
