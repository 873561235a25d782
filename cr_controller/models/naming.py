"""Deterministic resource names derived from a build and a shard id."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class RunNames:
    """Names every container of a run is created under.

    Everything is derived from build name, build id and shard id, so a crashed
    run's leftovers can be found and removed by recomputing the names.
    """

    build_name: str
    build_id: str

    @property
    def prefix(self) -> str:
        return f"{self.build_name}-{self.build_id}"

    @property
    def image(self) -> str:
        return self.build_name

    @property
    def database_container(self) -> str:
        return f"{self.prefix}-db"

    def sandbox(self, shard_id: str) -> str:
        return f"{self.prefix}-{shard_id}"

    def service(self, shard_id: str, service_name: str) -> str:
        return f"{self.sandbox(shard_id)}-{service_name}"

    def database_name(self, shard_id: str) -> str:
        return f"{self.build_name}_{self.build_id}_{shard_id}_test".replace("-", "_")

    def shard_resources(self, shard_id: str, service_names: Iterable[str]) -> list[str]:
        """Every container a shard may create, started or not."""
        return [self.sandbox(shard_id)] + [
            self.service(shard_id, name) for name in service_names
        ]
