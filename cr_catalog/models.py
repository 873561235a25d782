"""Immutable catalog data model: scenario files, parsed definitions and shards."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScenarioSpec:
    """One scenario (or outline) inside a feature file.

    ``example_rows`` is None for a plain scenario and the total number of
    example table rows for an outline.
    """

    name: str
    step_count: int
    example_rows: int | None = None

    @property
    def is_outline(self) -> bool:
        return self.example_rows is not None


@dataclass(frozen=True)
class ScenarioDefinition:
    """Structured result of parsing a single scenario file."""

    path: str
    tags: frozenset[str] = frozenset()
    scenarios: tuple[ScenarioSpec, ...] = ()


@dataclass(frozen=True)
class ScenarioFile:
    """A discovered scenario file that passed the tag filter."""

    path: str
    tags: frozenset[str] = frozenset()
    weight: int = 0

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError(f"ScenarioFile {self.path}: weight must be >= 0")


@dataclass(frozen=True)
class Shard:
    """A unit of parallel execution: an identifier plus its ordered files."""

    shard_id: str
    files: tuple[ScenarioFile, ...] = field(default_factory=tuple)

    @property
    def weight(self) -> int:
        return sum(item.weight for item in self.files)

    @property
    def paths(self) -> list[str]:
        return [item.path for item in self.files]
