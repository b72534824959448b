"""
Command line driver.

Usage:
    rpncalc                       # read expressions line by line
    rpncalc -e "2 + 3 * 4"        # evaluate one expression and exit
    rpncalc --var x=3 -e "x ^ 2"  # pre-bind variables

Variables that are not pre-bound are asked for interactively, once per
session. Settings come from --config / $RPNCALC_CONFIG and RPNCALC_*
environment variables (see rpncalc.config).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, List, Optional, TextIO, Tuple

from .calculator import Calculator
from .config import CalculatorConfig, load_config
from .errors import ErrorKind, EvaluationError
from .resolver import PromptResolver

logger = logging.getLogger(__name__)

PROMPT = "> "
EXIT_COMMANDS = ("exit", "quit")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str) -> None:
    """Routes log records to stderr at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def parse_variable(text: str) -> Tuple[str, float]:
    """Parses a `name=value` command line binding."""
    name, sep, raw_value = text.partition("=")
    name = name.strip()
    if not sep or not name.isalpha() or not name.isascii():
        raise argparse.ArgumentTypeError(f"expected name=value, got '{text}'")
    try:
        return name, float(raw_value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid value for {name}: '{raw_value}'")


def format_value(value: float) -> str:
    """Renders a result; whole numbers keep their trailing `.0`."""
    return repr(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rpncalc",
        description="Evaluate arithmetic expressions with + - * / ^, "
        "sin cos tan sqrt abs and variables.",
    )
    parser.add_argument("-e", "--expr", type=str, help="Evaluate EXPR and exit")
    parser.add_argument(
        "--var",
        action="append",
        type=parse_variable,
        default=[],
        metavar="NAME=VALUE",
        help="Bind a variable before evaluating (repeatable)",
    )
    parser.add_argument("--config", type=str, help="Path to a YAML configuration file")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error", "critical"],
        help="Override the configured log level",
    )
    return parser


def make_prompt(stdin: TextIO, stdout: TextIO) -> Callable[[str], str]:
    """Builds a prompt function that reads answers from `stdin`."""

    def prompt(text: str) -> str:
        stdout.write(text)
        stdout.flush()
        line = stdin.readline()
        if not line:
            raise EvaluationError(
                "No value supplied: end of input", ErrorKind.UNRESOLVED_VARIABLE
            )
        return line

    return prompt


def evaluate_line(calculator: Calculator, line: str, stdout: TextIO) -> bool:
    """Evaluates one line and prints the outcome. Returns True on success."""
    result = calculator.try_evaluate(line)
    if result.success:
        stdout.write(f"Result: {format_value(result.value)}\n")
        return True

    assert result.error is not None
    stdout.write(f"Error: {result.error.format_with_context()}\n")
    return False


def run_repl(calculator: Calculator, stdin: TextIO, stdout: TextIO) -> int:
    """Reads expressions until end of input or an exit command."""
    while True:
        stdout.write(PROMPT)
        stdout.flush()
        line = stdin.readline()
        if not line:
            stdout.write("\n")
            return 0

        expression = line.strip()
        if not expression:
            continue
        if expression.lower() in EXIT_COMMANDS:
            return 0

        evaluate_line(calculator, expression, stdout)


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    args = build_parser().parse_args(argv)

    try:
        config: CalculatorConfig = load_config(args.config)
    except (OSError, ValueError) as error:
        sys.stderr.write(f"rpncalc: invalid configuration: {error}\n")
        return 2

    setup_logging(args.log_level or config.log_level)
    logger.debug("cli_started", extra={"one_shot": args.expr is not None})

    calculator = Calculator(
        resolver=PromptResolver(make_prompt(stdin, stdout)),
        config=config,
        variables=dict(args.var),
    )

    if args.expr is not None:
        return 0 if evaluate_line(calculator, args.expr, stdout) else 1

    stdout.write("Enter an arithmetic expression (for example: x + y - 10)\n")
    return run_repl(calculator, stdin, stdout)


def main_entry() -> int:
    """Console script entry point."""
    return main()
