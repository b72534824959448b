"""
Resource limits for tokenizing and evaluating expressions.

These limits keep a single evaluation bounded when expressions come from
untrusted input.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import LimitExceededError


@dataclass(frozen=True)
class ExpressionLimits:
    """Expression limits configuration."""

    # Maximum expression string length in characters
    max_expression_length: int = 4096

    # Maximum number of tokens produced by the tokenizer
    max_tokens: int = 1024

    # Maximum operand stack depth during evaluation
    max_stack_depth: int = 256


# Default expression limits.
DEFAULT_EXPRESSION_LIMITS = ExpressionLimits()


def check_expression_length(
    expression: str, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates that expression length is within limits."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if len(expression) > limits.max_expression_length:
        raise LimitExceededError(
            "max_expression_length", limits.max_expression_length, len(expression)
        )


def check_token_count(
    count: int,
    limits: Optional[ExpressionLimits] = None,
    position: Optional[int] = None,
) -> None:
    """Validates the token count during tokenization."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_tokens:
        raise LimitExceededError("max_tokens", limits.max_tokens, count, position)


def check_stack_depth(
    depth: int,
    limits: Optional[ExpressionLimits] = None,
    position: Optional[int] = None,
) -> None:
    """Validates the operand stack depth during evaluation."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if depth > limits.max_stack_depth:
        raise LimitExceededError(
            "max_stack_depth", limits.max_stack_depth, depth, position
        )
