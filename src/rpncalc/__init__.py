"""
Arithmetic expression calculator.

Evaluates expressions such as `2 + 3 * sin(x) ^ 2` by tokenizing the text,
converting it to postfix order with the shunting yard algorithm and
evaluating the postfix form on a stack. Variables are resolved on demand
through an injectable resolver and remembered per Calculator.
"""

# Builtins
from .builtins import (
    BUILTIN_FUNCTIONS,
    FunctionRegistry,
    FunctionSpec,
    call_builtin,
    is_builtin_function,
)

# Calculator
from .calculator import (
    Calculator,
    EvaluationResult,
    evaluate,
)
from .config import (
    CalculatorConfig,
    LimitsConfig,
    load_config,
)

# Converter
from .converter import (
    PostfixConverter,
    to_postfix,
)
from .errors import (
    ErrorKind,
    EvaluationError,
    ExpressionError,
    LimitExceededError,
    ParseError,
    TokenizerError,
)

# Evaluator
from .evaluator import (
    PostfixEvaluator,
    evaluate_postfix,
)
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_expression_length,
    check_stack_depth,
    check_token_count,
)

# Operators
from .operators import (
    DEFAULT_OPERATORS,
    Associativity,
    Operator,
    OperatorSpec,
    OperatorTable,
    power,
    with_power_associativity,
)

# Resolvers
from .resolver import (
    CallableResolver,
    MappingResolver,
    PromptResolver,
    VariableResolver,
)

# Tokenizer
from .tokenizer import (
    Token,
    Tokenizer,
    TokenType,
    tokenize,
)

__all__ = [
    # Errors
    "ErrorKind",
    "ExpressionError",
    "TokenizerError",
    "ParseError",
    "EvaluationError",
    "LimitExceededError",
    # Limits
    "ExpressionLimits",
    "DEFAULT_EXPRESSION_LIMITS",
    "check_expression_length",
    "check_token_count",
    "check_stack_depth",
    # Operators
    "Operator",
    "Associativity",
    "OperatorSpec",
    "OperatorTable",
    "DEFAULT_OPERATORS",
    "power",
    "with_power_associativity",
    # Builtins
    "FunctionSpec",
    "FunctionRegistry",
    "BUILTIN_FUNCTIONS",
    "call_builtin",
    "is_builtin_function",
    # Tokenizer
    "Token",
    "TokenType",
    "Tokenizer",
    "tokenize",
    # Converter
    "PostfixConverter",
    "to_postfix",
    # Resolvers
    "VariableResolver",
    "MappingResolver",
    "CallableResolver",
    "PromptResolver",
    # Evaluator
    "PostfixEvaluator",
    "evaluate_postfix",
    # Calculator
    "Calculator",
    "EvaluationResult",
    "evaluate",
    # Config
    "CalculatorConfig",
    "LimitsConfig",
    "load_config",
]
