"""
Calculator configuration.

Settings come from an optional YAML file overlaid with environment
variables:

    RPNCALC_CONFIG - Path to a YAML configuration file
    RPNCALC_LOG_LEVEL - Log level (debug, info, warning, error, critical)
    RPNCALC_POWER_ASSOCIATIVITY - Associativity of ^ (left or right)
    RPNCALC_MAX_EXPRESSION_LENGTH - Maximum expression length in characters
    RPNCALC_MAX_TOKENS - Maximum number of tokens per expression
    RPNCALC_MAX_STACK_DEPTH - Maximum operand stack depth

Example file:

    power_associativity: right
    log_level: info
    limits:
      max_tokens: 512
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .limits import ExpressionLimits
from .operators import Associativity, Operator, OperatorSpec, with_power_associativity

logger = logging.getLogger(__name__)

ENV_VAR_CONFIG_FILE = "RPNCALC_CONFIG"
ENV_VAR_LOG_LEVEL = "RPNCALC_LOG_LEVEL"
ENV_VAR_POWER_ASSOCIATIVITY = "RPNCALC_POWER_ASSOCIATIVITY"
ENV_VAR_MAX_EXPRESSION_LENGTH = "RPNCALC_MAX_EXPRESSION_LENGTH"
ENV_VAR_MAX_TOKENS = "RPNCALC_MAX_TOKENS"
ENV_VAR_MAX_STACK_DEPTH = "RPNCALC_MAX_STACK_DEPTH"

# Environment variables that map onto `limits` fields
LIMIT_ENV_VARS: Dict[str, str] = {
    ENV_VAR_MAX_EXPRESSION_LENGTH: "max_expression_length",
    ENV_VAR_MAX_TOKENS: "max_tokens",
    ENV_VAR_MAX_STACK_DEPTH: "max_stack_depth",
}

LogLevel = Literal["debug", "info", "warning", "error", "critical"]


class LimitsConfig(BaseModel):
    """Resource limits applied to every evaluation."""

    max_expression_length: int = Field(
        4096, gt=0, description="Maximum expression length in characters"
    )
    max_tokens: int = Field(1024, gt=0, description="Maximum tokens per expression")
    max_stack_depth: int = Field(256, gt=0, description="Maximum operand stack depth")

    model_config = ConfigDict(extra="forbid")

    def to_limits(self) -> ExpressionLimits:
        return ExpressionLimits(
            max_expression_length=self.max_expression_length,
            max_tokens=self.max_tokens,
            max_stack_depth=self.max_stack_depth,
        )


class CalculatorConfig(BaseModel):
    """Top-level calculator settings."""

    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    power_associativity: Literal["left", "right"] = Field(
        "left", description="Grouping of chained ^ operators"
    )
    log_level: LogLevel = Field("warning", description="Log level for the CLI")

    model_config = ConfigDict(extra="forbid")

    @field_validator("power_associativity", "log_level", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def operator_table(self) -> Dict[Operator, OperatorSpec]:
        """Builds the operator table these settings describe."""
        return with_power_associativity(Associativity(self.power_associativity))


def _read_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        parsed = yaml.safe_load(handle)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return parsed


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> CalculatorConfig:
    """
    Loads calculator settings.

    Args:
        path: Optional YAML file; defaults to $RPNCALC_CONFIG when set
        environ: Environment mapping (defaults to os.environ)

    Returns:
        The validated configuration

    Raises:
        ValueError: If the file is not a mapping or a setting is invalid
            (pydantic's ValidationError is a ValueError)
        OSError: If the configuration file cannot be read
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}

    config_path = path or environ.get(ENV_VAR_CONFIG_FILE)
    if config_path:
        data = _read_yaml(Path(config_path))
        logger.debug("config_file_loaded", extra={"path": str(config_path)})

    if environ.get(ENV_VAR_LOG_LEVEL):
        data["log_level"] = environ[ENV_VAR_LOG_LEVEL]
    if environ.get(ENV_VAR_POWER_ASSOCIATIVITY):
        data["power_associativity"] = environ[ENV_VAR_POWER_ASSOCIATIVITY]

    env_limits = {
        field_name: environ[env_var]
        for env_var, field_name in LIMIT_ENV_VARS.items()
        if environ.get(env_var)
    }
    file_limits = data.get("limits") or {}
    if env_limits and isinstance(file_limits, dict):
        data["limits"] = {**file_limits, **env_limits}

    return CalculatorConfig.model_validate(data)
