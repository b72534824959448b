"""
Operator table for the calculator.

Maps each operator to its precedence, associativity, arity and the float
operation it performs. Precedence (lowest to highest):
1. Additive: +, -
2. Multiplicative: *, /
3. Power: ^ and unary minus

Every binary operator is left-associative by default, so `2^3^2` groups as
`(2^3)^2`. Use `with_power_associativity` to build a table where `^` is
right-associative instead.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Mapping, Optional


class Operator(Enum):
    """Operators understood by the converter and evaluator."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "^"
    # Unary minus; the converter picks it for a `-` in prefix position
    NEGATE = "neg"

    @property
    def symbol(self) -> str:
        """The source character for this operator."""
        return "-" if self is Operator.NEGATE else self.value


class Associativity(Enum):
    """Tie-break rule for operators of equal precedence."""

    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class OperatorSpec:
    """Precedence, associativity and implementation of an operator."""

    precedence: int
    associativity: Associativity
    arity: int
    apply: Callable[..., float]


# Signature of an operator table.
OperatorTable = Mapping[Operator, OperatorSpec]


# Single-character symbols that lex as binary operators.
BINARY_OPERATOR_SYMBOLS: Dict[str, Operator] = {
    "+": Operator.ADD,
    "-": Operator.SUBTRACT,
    "*": Operator.MULTIPLY,
    "/": Operator.DIVIDE,
    "^": Operator.POWER,
}


def _is_odd_integer(value: float) -> bool:
    return math.isfinite(value) and value == int(value) and int(value) % 2 == 1


def power(base: float, exponent: float) -> float:
    """
    Raises base to exponent with IEEE 754 pow semantics.

    math.pow raises where IEEE pow returns a value, so those cases are
    mapped back: a negative base with a fractional exponent gives NaN,
    zero to a negative power gives an infinity, and overflow gives an
    infinity carrying the sign of the result.
    """
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0:
            if _is_odd_integer(exponent):
                return math.copysign(math.inf, base)
            return math.inf
        return math.nan


def _add(a: float, b: float) -> float:
    return a + b


def _subtract(a: float, b: float) -> float:
    return a - b


def _multiply(a: float, b: float) -> float:
    return a * b


def _divide(a: float, b: float) -> float:
    return a / b


def _negate(a: float) -> float:
    return -a


# Default operator table.
DEFAULT_OPERATORS: Dict[Operator, OperatorSpec] = {
    Operator.ADD: OperatorSpec(1, Associativity.LEFT, 2, _add),
    Operator.SUBTRACT: OperatorSpec(1, Associativity.LEFT, 2, _subtract),
    Operator.MULTIPLY: OperatorSpec(2, Associativity.LEFT, 2, _multiply),
    Operator.DIVIDE: OperatorSpec(2, Associativity.LEFT, 2, _divide),
    Operator.POWER: OperatorSpec(3, Associativity.LEFT, 2, power),
    Operator.NEGATE: OperatorSpec(3, Associativity.RIGHT, 1, _negate),
}


def with_power_associativity(
    associativity: Associativity,
    operators: Optional[OperatorTable] = None,
) -> Dict[Operator, OperatorSpec]:
    """Returns a copy of the operator table with `^` set to the given associativity."""
    table = dict(operators or DEFAULT_OPERATORS)
    table[Operator.POWER] = replace(table[Operator.POWER], associativity=associativity)
    return table


def get_operator_spec(
    operator: Operator, operators: Optional[OperatorTable] = None
) -> OperatorSpec:
    """Looks up an operator, falling back to the default table."""
    operators = operators or DEFAULT_OPERATORS
    return operators[operator]
