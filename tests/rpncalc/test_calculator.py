"""
Tests for the Calculator front end.
"""

import struct
import threading
from unittest.mock import Mock

import pytest

from rpncalc import (
    CalculatorConfig,
    CallableResolver,
    ErrorKind,
    EvaluationError,
    ExpressionError,
    LimitExceededError,
    MappingResolver,
    ParseError,
    TokenizerError,
    evaluate,
)
from rpncalc.calculator import Calculator


def counting_resolver(**values: float) -> Mock:
    """Helper returning a mock resolver backed by keyword values."""
    resolver = Mock()
    resolver.resolve.side_effect = lambda name: values[name]
    return resolver


class TestEvaluate:
    """Tests for Calculator.evaluate."""

    def test_arithmetic(self):
        assert Calculator().evaluate("2 + 3 * 4 - 4") == 10.0

    def test_brackets(self):
        assert Calculator().evaluate("(2 + 3) * 4") == 20.0

    def test_functions(self):
        calculator = Calculator()
        assert calculator.evaluate("sin(0)") == 0.0
        assert calculator.evaluate("cos(0)") == 1.0
        assert calculator.evaluate("sqrt(25)") == 5.0

    def test_literal_expression(self):
        assert Calculator().evaluate("3 * 2 + 1") == 7.0

    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("1 + 2 * 3", 7.0),
            ("(1 + 2) * 3", 9.0),
            ("10 / 4 - 1", 1.5),
            ("100 / 10 / 5", 2.0),
            ("2 * (3 + 4) * (5 - 1)", 56.0),
            ("1.5 + 2.25", 3.75),
        ],
    )
    def test_matches_standard_infix_evaluation(self, expression, expected):
        assert Calculator().evaluate(expression) == pytest.approx(expected)

    def test_repeated_evaluation_is_bit_identical(self):
        calculator = Calculator()
        expression = "sqrt(2) / 3 + 0.1 * 7 ^ 0.3"
        first = calculator.evaluate(expression)
        second = calculator.evaluate(expression)
        assert struct.pack("<d", first) == struct.pack("<d", second)


class TestErrors:
    """Tests for error propagation from each stage."""

    def test_invalid_operator_placement_fails(self):
        with pytest.raises(EvaluationError) as exc_info:
            Calculator().evaluate("2 + * 3")
        assert exc_info.value.kind == ErrorKind.MISSING_OPERAND

    def test_division_by_zero_fails(self):
        with pytest.raises(EvaluationError) as exc_info:
            Calculator().evaluate("4 / 0")
        assert exc_info.value.kind == ErrorKind.DIVISION_BY_ZERO

    @pytest.mark.parametrize("expression", ["(2 + 3", "2 + 3)", "((1)", "sin(1))"])
    def test_unbalanced_parentheses_fail(self, expression):
        with pytest.raises(ParseError) as exc_info:
            Calculator().evaluate(expression)
        assert exc_info.value.kind == ErrorKind.UNBALANCED_PARENS

    def test_tokenizer_errors_propagate(self):
        with pytest.raises(TokenizerError) as exc_info:
            Calculator().evaluate("2 & 3")
        assert exc_info.value.kind == ErrorKind.INVALID_CHARACTER

    def test_errors_carry_the_expression(self):
        with pytest.raises(ExpressionError) as exc_info:
            Calculator().evaluate("1 + 2 +")
        assert exc_info.value.expression == "1 + 2 +"

    def test_configured_limits_apply(self):
        config = CalculatorConfig.model_validate({"limits": {"max_tokens": 2}})
        with pytest.raises(LimitExceededError):
            Calculator(config=config).evaluate("1 + 2")


class TestVariables:
    """Tests for evaluator-scoped variable bindings."""

    def test_resolver_called_once_per_name(self):
        resolver = counting_resolver(x=3)
        calculator = Calculator(resolver=resolver)

        assert calculator.evaluate("x + 1") == 4.0
        assert calculator.evaluate("x + 2") == 5.0

        resolver.resolve.assert_called_once_with("x")

    def test_each_name_resolved_once_within_expression(self):
        resolver = counting_resolver(x=2, y=5)
        calculator = Calculator(resolver=resolver)

        assert calculator.evaluate("x * y + x ^ 2 - y") == 9.0
        assert resolver.resolve.call_count == 2

    def test_bindings_are_per_instance(self):
        first = Calculator(resolver=MappingResolver({"x": 1}))
        second = Calculator(resolver=MappingResolver({"x": 10}))

        assert first.evaluate("x") == 1.0
        assert second.evaluate("x") == 10.0
        assert first.variables == {"x": 1.0}

    def test_initial_variables_skip_the_resolver(self):
        resolver = counting_resolver()
        calculator = Calculator(resolver=resolver, variables={"rate": 0.5})

        assert calculator.evaluate("rate * 8") == 4.0
        resolver.resolve.assert_not_called()

    def test_bind_overrides_value(self):
        calculator = Calculator(variables={"x": 1})
        calculator.bind("x", 7)
        assert calculator.evaluate("x") == 7.0

    def test_clear_variables_resolves_again(self):
        resolver = counting_resolver(x=3)
        calculator = Calculator(resolver=resolver)
        calculator.evaluate("x")
        calculator.clear_variables()
        calculator.evaluate("x")

        assert resolver.resolve.call_count == 2
        assert calculator.variables == {"x": 3.0}

    def test_failed_evaluation_keeps_already_resolved_names(self):
        resolver = counting_resolver(x=3)
        calculator = Calculator(resolver=resolver)
        with pytest.raises(EvaluationError):
            calculator.evaluate("x / 0")

        assert calculator.variables == {"x": 3.0}

    def test_callable_resolver(self):
        calculator = Calculator(resolver=CallableResolver(lambda name: len(name)))
        assert calculator.evaluate("abc + de") == 5.0

    def test_variables_returns_a_copy(self):
        calculator = Calculator(variables={"x": 1})
        calculator.variables["x"] = 99
        assert calculator.evaluate("x") == 1.0


class TestPowerAssociativity:
    """Tests for configurable ^ associativity."""

    def test_left_associative_by_default(self):
        assert Calculator().evaluate("2 ^ 3 ^ 2") == 64.0

    def test_right_associative_when_configured(self):
        config = CalculatorConfig(power_associativity="right")
        assert Calculator(config=config).evaluate("2 ^ 3 ^ 2") == 512.0


class TestTryEvaluate:
    """Tests for the non-raising result API."""

    def test_success_result(self):
        result = Calculator().try_evaluate("1 + 1")
        assert result.success is True
        assert result.value == 2.0
        assert result.error is None

    def test_failure_result(self):
        result = Calculator().try_evaluate("4 / 0")
        assert result.success is False
        assert result.value is None
        assert result.error is not None
        assert result.error.kind == ErrorKind.DIVISION_BY_ZERO

    def test_limit_failure_carries_expression(self):
        config = CalculatorConfig.model_validate(
            {"limits": {"max_expression_length": 3}}
        )
        result = Calculator(config=config).try_evaluate("1 + 2")
        assert result.error is not None
        assert result.error.kind == ErrorKind.LIMIT_EXCEEDED
        assert result.error.expression == "1 + 2"

    def test_unexpected_errors_are_not_captured(self):
        resolver = Mock()
        resolver.resolve.side_effect = RuntimeError("boom")
        with pytest.raises(RuntimeError):
            Calculator(resolver=resolver).try_evaluate("x")

    def test_module_level_evaluate(self):
        result = evaluate("x * y", variables={"x": 6, "y": 7})
        assert result.success is True
        assert result.value == 42.0

    def test_module_level_evaluate_reports_errors(self):
        result = evaluate("x")
        assert result.success is False
        assert result.error is not None
        assert result.error.kind == ErrorKind.UNRESOLVED_VARIABLE


class TestConcurrency:
    """Tests for serialized access to one Calculator."""

    def test_concurrent_evaluations_resolve_once(self):
        resolver = counting_resolver(x=2)
        calculator = Calculator(resolver=resolver)
        results = []

        def worker():
            results.append(calculator.evaluate("x * 21"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [42.0] * 8
        resolver.resolve.assert_called_once_with("x")
