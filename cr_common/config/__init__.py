"""Configuration helpers shared across packages."""

from cr_common.config.env import (
    parse_bool_env,
    parse_list_env,
)

__all__ = ["parse_bool_env", "parse_list_env"]
