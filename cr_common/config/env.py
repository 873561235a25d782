"""Environment variable parsing utilities."""

from __future__ import annotations


def parse_bool_env(value: str | None) -> bool | None:
    """Parse a boolean from an environment variable string.

    Returns True for "1", "true", "yes", "on" (case-insensitive).
    Returns None if value is None.
    """
    if value is None:
        return None
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_list_env(value: str | None) -> list[str]:
    """Parse a comma-separated list, dropping blank entries.

    Example: "@smoke, ~@wip" -> ["@smoke", "~@wip"]
    Returns an empty list if value is None or empty.
    """
    if not value:
        return []
    return [token.strip() for token in value.split(",") if token.strip()]
