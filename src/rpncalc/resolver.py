"""
Variable resolvers.

A resolver supplies the value of a variable the calculator has not bound
yet. The calculator asks at most once per name and keeps the answer, so a
resolver may be slow or interactive; `PromptResolver` blocks on input.
"""

import logging
from typing import Callable, Mapping, Optional, Protocol, runtime_checkable

from .errors import ErrorKind, EvaluationError

logger = logging.getLogger(__name__)


@runtime_checkable
class VariableResolver(Protocol):
    """Supplies values for unbound variables."""

    def resolve(self, name: str) -> float:
        """Returns the value of `name` or raises an ExpressionError."""
        ...


class MappingResolver:
    """Resolves variables from a fixed mapping."""

    def __init__(self, values: Optional[Mapping[str, float]] = None):
        self._values = dict(values or {})

    def resolve(self, name: str) -> float:
        if name not in self._values:
            raise EvaluationError(
                f"Unknown variable: {name}", ErrorKind.UNRESOLVED_VARIABLE
            )
        return self._values[name]


class CallableResolver:
    """Adapts a plain `name -> value` callable."""

    def __init__(self, fn: Callable[[str], float]):
        self._fn = fn

    def resolve(self, name: str) -> float:
        return self._fn(name)


class PromptResolver:
    """
    Asks the user for each variable's value.

    The prompt function defaults to the builtin `input` and is called with
    the prompt text; its answer is parsed as a float. Blank or unparsable
    answers fail the evaluation.
    """

    PROMPT_TEMPLATE = "Enter value for variable {name}: "

    def __init__(self, prompt: Callable[[str], str] = input):
        self._prompt = prompt

    def resolve(self, name: str) -> float:
        answer = self._prompt(self.PROMPT_TEMPLATE.format(name=name)).strip()
        try:
            value = float(answer)
        except ValueError:
            raise EvaluationError(
                f"Invalid value for variable {name}: '{answer}'",
                ErrorKind.UNRESOLVED_VARIABLE,
            )
        logger.debug("variable_prompted", extra={"variable": name})
        return value
