"""
Tokenizer (lexer) for arithmetic expressions.

Converts expression strings into a flat list of tokens for the converter.
Whitespace is removed before scanning, so `1 2` lexes as the number `12`;
token positions still refer to the original string.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .builtins import FunctionRegistry, is_builtin_function
from .errors import ErrorKind, TokenizerError
from .limits import ExpressionLimits, check_expression_length, check_token_count
from .operators import BINARY_OPERATOR_SYMBOLS, Operator

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Token types produced by the tokenizer."""

    # Operands
    NUMBER = "NUMBER"
    IDENTIFIER = "IDENTIFIER"

    # Callables
    FUNCTION = "FUNCTION"
    OPERATOR = "OPERATOR"

    # Delimiters
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    COMMA = "COMMA"


@dataclass
class Token:
    """A token produced by the tokenizer."""

    type: TokenType
    value: str
    position: int

    # Parsed value of a NUMBER token
    number: Optional[float] = None

    # Resolved operator of an OPERATOR token
    operator: Optional[Operator] = None


# Numeric literals: digits with an optional fractional part
NUMBER_PATTERN = re.compile(r"[0-9]+(\.[0-9]+)?")

DELIMITERS = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
}


def _is_digit(ch: str) -> bool:
    """Checks if a character is a digit."""
    return "0" <= ch <= "9"


def _is_number_part(ch: str) -> bool:
    """Checks if a character can be part of a numeric literal."""
    return _is_digit(ch) or ch == "."


def _is_letter(ch: str) -> bool:
    """Checks if a character is an ASCII letter."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


class Tokenizer:
    """Tokenizer for expression strings."""

    def __init__(
        self,
        source: str,
        functions: Optional[FunctionRegistry] = None,
        limits: Optional[ExpressionLimits] = None,
    ):
        self._source = source
        self._functions = functions
        self._limits = limits
        # Non-whitespace characters paired with their offset in the source
        self._chars: List[Tuple[str, int]] = []
        self._current = 0
        self._tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """Tokenizes the source expression and returns all tokens."""
        check_expression_length(self._source, self._limits)

        self._chars = [
            (ch, index) for index, ch in enumerate(self._source) if not ch.isspace()
        ]

        while not self._is_at_end():
            self._scan_token()

        logger.debug(
            "tokenized",
            extra={"expression": self._source, "token_count": len(self._tokens)},
        )
        return self._tokens

    def _is_at_end(self) -> bool:
        return self._current >= len(self._chars)

    def _peek(self) -> str:
        if self._is_at_end():
            return "\0"
        return self._chars[self._current][0]

    def _advance(self) -> Tuple[str, int]:
        entry = self._chars[self._current]
        self._current += 1
        return entry

    def _add_token(self, token: Token) -> None:
        self._tokens.append(token)
        check_token_count(len(self._tokens), self._limits, token.position)

    def _scan_token(self) -> None:
        ch, position = self._advance()

        if ch in BINARY_OPERATOR_SYMBOLS:
            self._add_token(
                Token(
                    TokenType.OPERATOR,
                    ch,
                    position,
                    operator=BINARY_OPERATOR_SYMBOLS[ch],
                )
            )
            return

        if ch in DELIMITERS:
            self._add_token(Token(DELIMITERS[ch], ch, position))
            return

        if _is_number_part(ch):
            self._scan_number(ch, position)
            return

        if _is_letter(ch):
            self._scan_name(ch, position)
            return

        raise TokenizerError(
            f"Invalid character: '{ch}'",
            ErrorKind.INVALID_CHARACTER,
            position,
            self._source,
        )

    def _scan_number(self, first: str, start_position: int) -> None:
        value = first
        while _is_number_part(self._peek()):
            value += self._advance()[0]

        if not NUMBER_PATTERN.fullmatch(value):
            raise TokenizerError(
                f"Malformed number: '{value}'",
                ErrorKind.MALFORMED_NUMBER,
                start_position,
                self._source,
            )

        self._add_token(
            Token(TokenType.NUMBER, value, start_position, number=float(value))
        )

    def _scan_name(self, first: str, start_position: int) -> None:
        value = first
        while _is_letter(self._peek()):
            value += self._advance()[0]

        if is_builtin_function(value, self._functions):
            self._add_token(Token(TokenType.FUNCTION, value, start_position))
        else:
            self._add_token(Token(TokenType.IDENTIFIER, value, start_position))


def tokenize(
    source: str,
    functions: Optional[FunctionRegistry] = None,
    limits: Optional[ExpressionLimits] = None,
) -> List[Token]:
    """
    Tokenizes an expression string into tokens.

    Args:
        source: The expression string to tokenize
        functions: Optional function registry used to tell function names
            from variable names
        limits: Optional expression limits

    Returns:
        List of tokens

    Raises:
        TokenizerError: If the expression contains an invalid character or
            a malformed number
        LimitExceededError: If the expression or token count is too large
    """
    tokenizer = Tokenizer(source, functions, limits)
    return tokenizer.tokenize()
