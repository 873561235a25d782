"""Shared error taxonomy for cirunner."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class CRError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.error_type, "message": str(self), "context": self.context}


class SetupError(CRError):
    """Fatal failure before any shard starts (build, shared services, catalog)."""


class ConfigurationError(SetupError):
    """Failure due to invalid configuration."""


class DiscoveryError(SetupError):
    """Failure while walking the scenario tree."""


class ParseError(SetupError):
    """A scenario file could not be read or parsed."""


class ShardInfraError(CRError):
    """A shard's backing services or migration failed."""


class ShardTestError(CRError):
    """The shard's test command itself failed."""


class BestEffortError(CRError):
    """Artifact copy or teardown failure; logged, never affects the verdict."""


class RunInterruptedError(CRError):
    """The run was interrupted and emergency cleanup has been performed."""


T = TypeVar("T", bound=CRError)


def wrap_error(
    error_cls: type[T],
    message: str,
    *,
    context: Mapping[str, Any] | None = None,
    cause: Exception | None = None,
) -> T:
    """Create a typed CRError with optional context and cause."""
    return error_cls(message, context=context, cause=cause)


def error_to_payload(error: CRError) -> dict[str, Any]:
    """Convert a CRError to a log/report payload."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
