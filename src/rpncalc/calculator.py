"""
Calculator front end.

Runs the tokenizer, the postfix converter and the postfix evaluator in
sequence. A Calculator owns its variable bindings: once a variable has
been resolved it keeps that value for every later `evaluate` call on the
same instance, so the resolver is asked at most once per name.

Concurrent `evaluate` calls on one instance are serialized by an internal
lock. The resolver is called while the lock is held, so a blocking
resolver also blocks other callers of that instance.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .builtins import BUILTIN_FUNCTIONS, FunctionRegistry
from .config import CalculatorConfig
from .converter import to_postfix
from .errors import ExpressionError
from .evaluator import evaluate_postfix
from .resolver import MappingResolver, VariableResolver
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    """Result of evaluating an expression."""

    value: Optional[float]
    """The evaluated value, None if evaluation failed."""

    success: bool
    """Whether evaluation succeeded."""

    error: Optional[ExpressionError] = None
    """The error that stopped evaluation, if any."""


class Calculator:
    """Evaluates arithmetic expressions with session-scoped variables."""

    def __init__(
        self,
        resolver: Optional[VariableResolver] = None,
        config: Optional[CalculatorConfig] = None,
        functions: Optional[FunctionRegistry] = None,
        variables: Optional[Mapping[str, float]] = None,
    ):
        self._config = config or CalculatorConfig()
        self._resolver = resolver or MappingResolver()
        self._functions = functions or BUILTIN_FUNCTIONS
        self._operators = self._config.operator_table()
        self._limits = self._config.limits.to_limits()
        self._bindings: Dict[str, float] = {}
        self._lock = threading.Lock()

        for name, value in (variables or {}).items():
            self.bind(name, value)

    @property
    def config(self) -> CalculatorConfig:
        return self._config

    @property
    def variables(self) -> Dict[str, float]:
        """A copy of the current variable bindings."""
        with self._lock:
            return dict(self._bindings)

    def bind(self, name: str, value: float) -> None:
        """Binds a variable so the resolver is never asked for it."""
        with self._lock:
            self._bindings[name] = float(value)

    def clear_variables(self) -> None:
        """Forgets every binding; the resolver is asked again on next use."""
        with self._lock:
            self._bindings.clear()

    def evaluate(self, expression: str) -> float:
        """
        Evaluates an expression and returns its value.

        Raises:
            ExpressionError: The first error from any stage, unchanged
        """
        with self._lock:
            tokens = tokenize(expression, self._functions, self._limits)
            postfix = to_postfix(tokens, expression, self._operators, self._functions)
            return evaluate_postfix(
                postfix,
                self._resolver,
                self._bindings,
                self._operators,
                self._functions,
                self._limits,
                expression,
            )

    def try_evaluate(self, expression: str) -> EvaluationResult:
        """Evaluates an expression, returning errors instead of raising them."""
        try:
            value = self.evaluate(expression)
            return EvaluationResult(value=value, success=True)
        except ExpressionError as error:
            if error.expression is None:
                error.expression = expression
            logger.debug(
                "evaluation_failed",
                extra={"expression": expression, "kind": error.kind.value},
            )
            return EvaluationResult(value=None, success=False, error=error)


def evaluate(
    expression: str,
    resolver: Optional[VariableResolver] = None,
    config: Optional[CalculatorConfig] = None,
    variables: Optional[Mapping[str, float]] = None,
) -> EvaluationResult:
    """
    Evaluates a single expression with a throwaway Calculator.

    Args:
        expression: The expression to evaluate
        resolver: Optional resolver for variables not in `variables`
        config: Optional calculator settings
        variables: Optional initial variable bindings

    Returns:
        The evaluation result with value and success status
    """
    calculator = Calculator(resolver=resolver, config=config, variables=variables)
    return calculator.try_evaluate(expression)
