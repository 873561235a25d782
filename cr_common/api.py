"""Public API surface for cr_common."""

from cr_common.config.env import parse_bool_env, parse_list_env
from cr_common.errors import (
    BestEffortError,
    ConfigurationError,
    CRError,
    DiscoveryError,
    ParseError,
    RunInterruptedError,
    SetupError,
    ShardInfraError,
    ShardTestError,
    error_to_payload,
    wrap_error,
)
from cr_common.logging import configure_logging

__all__ = [
    "BestEffortError",
    "CRError",
    "ConfigurationError",
    "DiscoveryError",
    "ParseError",
    "RunInterruptedError",
    "SetupError",
    "ShardInfraError",
    "ShardTestError",
    "configure_logging",
    "error_to_payload",
    "parse_bool_env",
    "parse_list_env",
    "wrap_error",
]
