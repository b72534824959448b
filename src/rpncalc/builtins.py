"""
Built-in functions for the calculator.

All built-in functions are pure and deterministic. They follow IEEE 754
semantics: arguments outside a function's domain (e.g. `sqrt(-1)` or
`sin` of an infinity) produce NaN rather than raising.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Sequence

from .errors import ErrorKind, EvaluationError


@dataclass(frozen=True)
class FunctionSpec:
    """A named numeric function with a fixed arity."""

    name: str
    arity: int
    fn: Callable[..., float]


# Function registry for built-in and injected functions.
FunctionRegistry = Mapping[str, FunctionSpec]


def _nan_on_domain_error(fn: Callable[[float], float]) -> Callable[[float], float]:
    """Wraps a math function so domain errors produce NaN."""

    def wrapper(x: float) -> float:
        try:
            return fn(x)
        except ValueError:
            return math.nan

    wrapper.__name__ = fn.__name__
    return wrapper


# ============================================================
# Registry
# ============================================================

# Registry of all built-in functions.
BUILTIN_FUNCTIONS: Dict[str, FunctionSpec] = {
    "sin": FunctionSpec("sin", 1, _nan_on_domain_error(math.sin)),
    "cos": FunctionSpec("cos", 1, _nan_on_domain_error(math.cos)),
    "tan": FunctionSpec("tan", 1, _nan_on_domain_error(math.tan)),
    "sqrt": FunctionSpec("sqrt", 1, _nan_on_domain_error(math.sqrt)),
    "abs": FunctionSpec("abs", 1, math.fabs),
}


def call_builtin(
    name: str,
    args: Sequence[float],
    functions: Optional[FunctionRegistry] = None,
    position: Optional[int] = None,
) -> float:
    """
    Calls a built-in function by name.

    Args:
        name: The function name
        args: The function arguments, leftmost first
        functions: Optional function registry (defaults to BUILTIN_FUNCTIONS)
        position: Source position of the call, for error reporting

    Returns:
        The function result

    Raises:
        EvaluationError: If the function doesn't exist or gets the wrong
            number of arguments
    """
    functions = functions or BUILTIN_FUNCTIONS
    spec = functions.get(name)
    if spec is None:
        raise EvaluationError(
            f"Unknown function: {name}", ErrorKind.UNKNOWN_TOKEN, position
        )
    if len(args) != spec.arity:
        raise EvaluationError(
            f"{name}: expected {spec.arity} argument(s), got {len(args)}",
            ErrorKind.MISSING_FUNCTION_ARGUMENT,
            position,
        )
    return float(spec.fn(*args))


def is_builtin_function(
    name: str, functions: Optional[FunctionRegistry] = None
) -> bool:
    """Checks if a name is a built-in function."""
    functions = functions or BUILTIN_FUNCTIONS
    return name in functions
