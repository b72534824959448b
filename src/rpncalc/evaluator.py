"""
Postfix evaluator.

Evaluates a postfix token list with a single operand stack. Variables are
looked up in a caller-owned bindings map first; unbound names are passed
to a VariableResolver and the answer is stored back into the map, so a
name is resolved at most once per map.
"""

import logging
import math
from typing import Dict, List, MutableMapping, Optional

from .builtins import BUILTIN_FUNCTIONS, FunctionRegistry, call_builtin
from .errors import ErrorKind, EvaluationError, ExpressionError
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits, check_stack_depth
from .operators import DEFAULT_OPERATORS, Operator, OperatorTable
from .resolver import MappingResolver, VariableResolver
from .tokenizer import Token, TokenType

logger = logging.getLogger(__name__)


class PostfixEvaluator:
    """Evaluates postfix tokens and returns the result."""

    def __init__(
        self,
        resolver: Optional[VariableResolver] = None,
        bindings: Optional[MutableMapping[str, float]] = None,
        operators: Optional[OperatorTable] = None,
        functions: Optional[FunctionRegistry] = None,
        limits: Optional[ExpressionLimits] = None,
        source: str = "",
    ):
        self._resolver = resolver or MappingResolver()
        self._bindings: MutableMapping[str, float] = (
            bindings if bindings is not None else {}
        )
        self._operators = operators or DEFAULT_OPERATORS
        self._functions = functions or BUILTIN_FUNCTIONS
        self._limits = limits or DEFAULT_EXPRESSION_LIMITS
        self._source = source

    def evaluate(self, tokens: List[Token]) -> float:
        """Evaluates postfix tokens and returns the single remaining value."""
        stack: List[float] = []

        for token in tokens:
            token_type = token.type

            if token_type == TokenType.NUMBER:
                stack.append(self._number_value(token))
            elif token_type == TokenType.IDENTIFIER:
                stack.append(self._variable_value(token))
            elif token_type == TokenType.FUNCTION:
                self._apply_function(token, stack)
            elif token_type == TokenType.OPERATOR:
                self._apply_operator(token, stack)
            else:
                raise EvaluationError(
                    f"Unexpected token in postfix input: {token.value}",
                    ErrorKind.UNKNOWN_TOKEN,
                    token.position,
                    self._source,
                )

            check_stack_depth(len(stack), self._limits, token.position)

        if len(stack) != 1:
            raise EvaluationError(
                f"Malformed expression: {len(stack)} value(s) left after evaluation",
                ErrorKind.MALFORMED_EXPRESSION,
                None,
                self._source,
            )

        result = stack[0]
        logger.debug(
            "evaluated", extra={"expression": self._source, "result": result}
        )
        return result

    def _number_value(self, token: Token) -> float:
        if token.number is not None:
            return token.number
        try:
            return float(token.value)
        except ValueError:
            raise EvaluationError(
                f"Malformed number: '{token.value}'",
                ErrorKind.MALFORMED_NUMBER,
                token.position,
                self._source,
            )

    def _variable_value(self, token: Token) -> float:
        name = token.value
        if name in self._bindings:
            return self._bindings[name]

        try:
            value = self._resolver.resolve(name)
        except ExpressionError as error:
            if error.position is None:
                error.position = token.position
                error.expression = self._source
            raise

        if (
            isinstance(value, bool)
            or not isinstance(value, (int, float))
            or not math.isfinite(value)
        ):
            raise EvaluationError(
                f"Variable {name} resolved to a non-finite or non-numeric value: "
                f"{value!r}",
                ErrorKind.UNRESOLVED_VARIABLE,
                token.position,
                self._source,
            )

        value = float(value)
        self._bindings[name] = value
        logger.debug("variable_resolved", extra={"variable": name})
        return value

    def _apply_function(self, token: Token, stack: List[float]) -> None:
        spec = self._functions.get(token.value)
        arity = spec.arity if spec is not None else 1
        if len(stack) < arity:
            raise EvaluationError(
                f"Missing argument for function: {token.value}",
                ErrorKind.MISSING_FUNCTION_ARGUMENT,
                token.position,
                self._source,
            )

        args = stack[len(stack) - arity :]
        del stack[len(stack) - arity :]
        try:
            result = call_builtin(token.value, args, self._functions, token.position)
        except ExpressionError as error:
            error.expression = self._source
            raise
        stack.append(result)

    def _apply_operator(self, token: Token, stack: List[float]) -> None:
        operator = token.operator
        if operator is None or operator not in self._operators:
            raise EvaluationError(
                f"Unknown operator: {token.value}",
                ErrorKind.UNKNOWN_TOKEN,
                token.position,
                self._source,
            )

        spec = self._operators[operator]
        if len(stack) < spec.arity:
            raise EvaluationError(
                f"Missing operand for operator: {operator.symbol}",
                ErrorKind.MISSING_OPERAND,
                token.position,
                self._source,
            )

        if spec.arity == 1:
            stack.append(spec.apply(stack.pop()))
            return

        # The right-hand operand was pushed last
        b = stack.pop()
        a = stack.pop()
        if operator == Operator.DIVIDE and b == 0:
            raise EvaluationError(
                "Division by zero",
                ErrorKind.DIVISION_BY_ZERO,
                token.position,
                self._source,
            )
        stack.append(spec.apply(a, b))


def evaluate_postfix(
    tokens: List[Token],
    resolver: Optional[VariableResolver] = None,
    bindings: Optional[Dict[str, float]] = None,
    operators: Optional[OperatorTable] = None,
    functions: Optional[FunctionRegistry] = None,
    limits: Optional[ExpressionLimits] = None,
    source: str = "",
) -> float:
    """
    Evaluates postfix tokens to a single number.

    Args:
        tokens: Tokens in postfix order
        resolver: Supplies values for variables missing from `bindings`
        bindings: Variable bindings; newly resolved variables are added
        operators: Optional operator table
        functions: Optional function registry
        limits: Optional expression limits
        source: Source expression for error reporting

    Returns:
        The evaluated value

    Raises:
        EvaluationError: On missing operands or arguments, division by zero
            or a malformed expression
    """
    evaluator = PostfixEvaluator(
        resolver, bindings, operators, functions, limits, source
    )
    return evaluator.evaluate(tokens)
