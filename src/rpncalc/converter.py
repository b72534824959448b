"""
Infix to postfix conversion.

Rearranges a token list into reverse Polish notation with the shunting
yard algorithm. Grouping is decided by the operator table: an incoming
operator pops every stacked operator that binds tighter, and every
operator of equal precedence when the incoming one is left-associative.

A `-` at the start of the expression, after another operator, after `(`
or after `,` is unary minus. Unary minus never pops on arrival and yields
only to operators of strictly lower precedence, so `-2^2` is `-(2^2)`.
"""

import logging
from dataclasses import dataclass
from typing import List, NoReturn, Optional

from .builtins import BUILTIN_FUNCTIONS, FunctionRegistry
from .errors import ErrorKind, ParseError
from .operators import (
    BINARY_OPERATOR_SYMBOLS,
    Associativity,
    DEFAULT_OPERATORS,
    Operator,
    OperatorSpec,
    OperatorTable,
)
from .tokenizer import Token, TokenType

logger = logging.getLogger(__name__)

# Token types after which a `-` is unary minus
PREFIX_CONTEXT = (TokenType.OPERATOR, TokenType.LPAREN, TokenType.COMMA)


@dataclass
class _OpenParen:
    """Bookkeeping for one unclosed `(`."""

    token: Token

    # Function whose argument list this paren opens, if any
    function: Optional[Token] = None

    commas: int = 0
    has_arguments: bool = False


class PostfixConverter:
    """Converts an infix token list to postfix order."""

    def __init__(
        self,
        tokens: List[Token],
        source: str = "",
        operators: Optional[OperatorTable] = None,
        functions: Optional[FunctionRegistry] = None,
    ):
        self._tokens = tokens
        self._source = source
        self._operators = operators or DEFAULT_OPERATORS
        self._functions = functions or BUILTIN_FUNCTIONS
        self._output: List[Token] = []
        self._stack: List[Token] = []
        self._parens: List[_OpenParen] = []

    def convert(self) -> List[Token]:
        """Converts the token list and returns it in postfix order."""
        previous: Optional[Token] = None

        for token in self._tokens:
            if previous is not None and previous.type == TokenType.FUNCTION:
                if token.type != TokenType.LPAREN:
                    self._raise_missing_call_parens(previous)

            if self._parens and token.type != TokenType.RPAREN:
                self._parens[-1].has_arguments = True

            self._convert_token(token, previous)
            previous = token

        if previous is not None and previous.type == TokenType.FUNCTION:
            self._raise_missing_call_parens(previous)

        while self._stack:
            top = self._stack.pop()
            if top.type == TokenType.LPAREN:
                raise ParseError(
                    "Unbalanced parentheses: '(' is never closed",
                    ErrorKind.UNBALANCED_PARENS,
                    top.position,
                    self._source,
                )
            self._output.append(top)

        logger.debug(
            "converted",
            extra={
                "expression": self._source,
                "postfix": " ".join(t.value for t in self._output),
            },
        )
        return self._output

    # ============================================================
    # Token Handlers
    # ============================================================

    def _convert_token(self, token: Token, previous: Optional[Token]) -> None:
        token_type = token.type

        if token_type in (TokenType.NUMBER, TokenType.IDENTIFIER):
            self._output.append(token)
            return

        if token_type == TokenType.FUNCTION:
            if token.value not in self._functions:
                self._raise_unknown(token)
            self._stack.append(token)
            return

        if token_type == TokenType.COMMA:
            self._convert_comma()
            return

        if token_type == TokenType.OPERATOR:
            self._convert_operator(token, previous)
            return

        if token_type == TokenType.LPAREN:
            function = None
            if previous is not None and previous.type == TokenType.FUNCTION:
                function = previous
            self._parens.append(_OpenParen(token, function))
            self._stack.append(token)
            return

        if token_type == TokenType.RPAREN:
            self._convert_close_paren(token)
            return

        self._raise_unknown(token)

    def _convert_comma(self) -> None:
        while self._stack and self._stack[-1].type != TokenType.LPAREN:
            self._output.append(self._stack.pop())
        if self._parens:
            self._parens[-1].commas += 1

    def _convert_operator(self, token: Token, previous: Optional[Token]) -> None:
        operator = token.operator or BINARY_OPERATOR_SYMBOLS.get(token.value)
        if operator is None or operator not in self._operators:
            self._raise_unknown(token)

        if operator == Operator.SUBTRACT and (
            previous is None or previous.type in PREFIX_CONTEXT
        ):
            self._stack.append(
                Token(
                    TokenType.OPERATOR,
                    token.value,
                    token.position,
                    operator=Operator.NEGATE,
                )
            )
            return

        spec = self._operators[operator]
        while self._stack and self._should_pop(self._stack[-1], spec):
            self._output.append(self._stack.pop())

        if token.operator is None:
            token = Token(token.type, token.value, token.position, operator=operator)
        self._stack.append(token)

    def _should_pop(self, top: Token, incoming: OperatorSpec) -> bool:
        if top.type != TokenType.OPERATOR or top.operator is None:
            return False
        top_spec = self._operators[top.operator]
        if top_spec.arity == 1:
            return top_spec.precedence > incoming.precedence
        if top_spec.precedence > incoming.precedence:
            return True
        return (
            top_spec.precedence == incoming.precedence
            and incoming.associativity == Associativity.LEFT
        )

    def _convert_close_paren(self, token: Token) -> None:
        while self._stack and self._stack[-1].type != TokenType.LPAREN:
            self._output.append(self._stack.pop())

        if not self._stack:
            raise ParseError(
                "Unbalanced parentheses: unexpected ')'",
                ErrorKind.UNBALANCED_PARENS,
                token.position,
                self._source,
            )

        self._stack.pop()
        paren = self._parens.pop()

        if paren.function is not None:
            self._check_argument_count(paren)

        if self._stack and self._stack[-1].type == TokenType.FUNCTION:
            self._output.append(self._stack.pop())

    # ============================================================
    # Validation Helpers
    # ============================================================

    def _check_argument_count(self, paren: _OpenParen) -> None:
        function = paren.function
        assert function is not None
        # An empty argument list is reported by the evaluator
        if not paren.has_arguments:
            return
        arity = self._functions[function.value].arity
        count = paren.commas + 1
        if count != arity:
            raise ParseError(
                f"{function.value}: expected {arity} argument(s), got {count}",
                ErrorKind.INVALID_CALL,
                function.position,
                self._source,
            )

    def _raise_missing_call_parens(self, function: Token) -> NoReturn:
        raise ParseError(
            f"Expected '(' after function '{function.value}'",
            ErrorKind.INVALID_CALL,
            function.position,
            self._source,
        )

    def _raise_unknown(self, token: Token) -> NoReturn:
        raise ParseError(
            f"Unknown token: {token.value or token.type.value}",
            ErrorKind.UNKNOWN_TOKEN,
            token.position,
            self._source,
        )


def to_postfix(
    tokens: List[Token],
    source: str = "",
    operators: Optional[OperatorTable] = None,
    functions: Optional[FunctionRegistry] = None,
) -> List[Token]:
    """
    Converts infix tokens to postfix (reverse Polish) order.

    Args:
        tokens: Tokens from the tokenizer
        source: Source expression for error reporting
        operators: Optional operator table (defaults to DEFAULT_OPERATORS)
        functions: Optional function registry (defaults to BUILTIN_FUNCTIONS)

    Returns:
        Tokens in postfix order

    Raises:
        ParseError: On unbalanced parentheses, unknown tokens or malformed
            function calls
    """
    converter = PostfixConverter(tokens, source, operators, functions)
    return converter.convert()
