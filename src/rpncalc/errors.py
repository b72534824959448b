"""
Error types for the calculator.

All calculator errors extend ExpressionError and carry an ErrorKind so
callers can branch on the failure without parsing messages.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Closed set of failure kinds."""

    # Tokenizer
    INVALID_CHARACTER = "invalid_character"
    MALFORMED_NUMBER = "malformed_number"

    # Converter
    UNBALANCED_PARENS = "unbalanced_parens"
    UNKNOWN_TOKEN = "unknown_token"
    INVALID_CALL = "invalid_call"

    # Evaluator
    MISSING_OPERAND = "missing_operand"
    MISSING_FUNCTION_ARGUMENT = "missing_function_argument"
    DIVISION_BY_ZERO = "division_by_zero"
    MALFORMED_EXPRESSION = "malformed_expression"
    UNRESOLVED_VARIABLE = "unresolved_variable"

    # Limits
    LIMIT_EXCEEDED = "limit_exceeded"


class ExpressionError(Exception):
    """
    Base error class for all calculator errors.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.position = position
        self.expression = expression

    def format_with_context(self) -> str:
        """
        Returns a formatted error message with position context.
        """
        if self.expression is None or self.position is None:
            return self.message

        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"


class TokenizerError(ExpressionError):
    """
    Error thrown during tokenization (lexical analysis).
    """

    pass


class ParseError(ExpressionError):
    """
    Error thrown while converting tokens to postfix (syntax analysis).
    """

    pass


class EvaluationError(ExpressionError):
    """
    Error thrown while evaluating postfix tokens (runtime error).
    """

    pass


class LimitExceededError(ExpressionError):
    """
    Error thrown when expression limits are exceeded.
    """

    def __init__(
        self,
        limit_name: str,
        limit: int,
        actual: int,
        position: Optional[int] = None,
    ):
        message = f"Limit exceeded: {limit_name} (limit: {limit}, actual: {actual})"
        super().__init__(message, ErrorKind.LIMIT_EXCEEDED, position)
        self.limit_name = limit_name
        self.limit = limit
        self.actual = actual
