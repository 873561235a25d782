"""Per-shard service lifecycle: backing services, migration, tests, teardown."""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional, Sequence

from cr_common.errors import ShardInfraError
from cr_controller.adapters.container_engine import ContainerEngine
from cr_controller.adapters.process import CommandResult
from cr_controller.models.config import ProjectConfig
from cr_controller.models.naming import RunNames
from cr_controller.models.types import OutcomeKind
from cr_controller.services.readiness import wait_until_ready

logger = logging.getLogger(__name__)


class ShardPhase(str, Enum):
    """Lifecycle states of one shard."""

    IDLE = "idle"
    SERVICES_STARTING = "services_starting"
    SERVICES_READY = "services_ready"
    MIGRATION_RUNNING = "migration_running"
    MIGRATION_DONE = "migration_done"
    TEST_RUNNING = "test_running"
    COMPLETED = "completed"
    TORN_DOWN = "torn_down"


_ALLOWED_TRANSITIONS = {
    ShardPhase.IDLE: {ShardPhase.SERVICES_STARTING},
    ShardPhase.SERVICES_STARTING: {ShardPhase.SERVICES_READY},
    ShardPhase.SERVICES_READY: {ShardPhase.MIGRATION_RUNNING},
    ShardPhase.MIGRATION_RUNNING: {ShardPhase.MIGRATION_DONE},
    ShardPhase.MIGRATION_DONE: {ShardPhase.TEST_RUNNING},
    ShardPhase.TEST_RUNNING: {ShardPhase.COMPLETED},
    ShardPhase.COMPLETED: {ShardPhase.TORN_DOWN},
    ShardPhase.TORN_DOWN: set(),
}

_PRE_TEST_PHASES = {
    ShardPhase.IDLE,
    ShardPhase.SERVICES_STARTING,
    ShardPhase.SERVICES_READY,
    ShardPhase.MIGRATION_RUNNING,
    ShardPhase.MIGRATION_DONE,
}


def _infra_error(message: str, shard_id: str, result: CommandResult | None = None) -> ShardInfraError:
    context: dict[str, object] = {"shard": shard_id}
    if result is not None:
        context.update(
            {"command": result.args, "stdout": result.stdout, "stderr": result.stderr}
        )
    return ShardInfraError(message, context=context)


class ServiceLifecycle:
    """Drives one shard's containers through its lifecycle.

    Any failure before the test command starts completes the shard as an
    infrastructure failure. ``teardown`` is valid in every phase, removes
    every container the shard could have created and can run any number of
    times.
    """

    def __init__(
        self,
        shard_id: str,
        *,
        engine: ContainerEngine,
        names: RunNames,
        project: ProjectConfig,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.shard_id = shard_id
        self._engine = engine
        self._names = names
        self._project = project
        self._sleep = sleep
        self._clock = clock
        self._lock = threading.Lock()
        self._phase = ShardPhase.IDLE
        self._completion: Optional[OutcomeKind] = None

    @property
    def phase(self) -> ShardPhase:
        with self._lock:
            return self._phase

    @property
    def completion(self) -> Optional[OutcomeKind]:
        with self._lock:
            return self._completion

    @property
    def sandbox(self) -> str:
        return self._names.sandbox(self.shard_id)

    def service_container(self, service_name: str) -> str:
        return self._names.service(self.shard_id, service_name)

    def resources(self) -> list[str]:
        return self._names.shard_resources(
            self.shard_id, [spec.name for spec in self._project.services]
        )

    def links(self) -> list[tuple[str, str]]:
        links = [(self._names.database_container, self._project.database.alias)]
        links.extend(
            (self.service_container(spec.name), spec.alias) for spec in self._project.services
        )
        return links

    def sandbox_env(self) -> dict[str, str]:
        env = dict(self._project.env)
        env[self._project.database_env_var] = self._names.database_name(self.shard_id)
        return env

    def _transition(self, new_phase: ShardPhase) -> None:
        with self._lock:
            if new_phase not in _ALLOWED_TRANSITIONS[self._phase]:
                raise ValueError(f"Invalid transition {self._phase} -> {new_phase}")
            self._phase = new_phase
        logger.debug("Run %s -> %s", self.shard_id, new_phase.value)

    def start_backing_services(self) -> None:
        """Launch every per-shard service and wait for it to be ready."""
        self._transition(ShardPhase.SERVICES_STARTING)
        for spec in self._project.services:
            container = self.service_container(spec.name)
            result = self._engine.run_detached(container, spec.image, env=spec.env)
            if not result.ok:
                raise _infra_error(
                    f"Starting {spec.name} failed: {result.describe()}", self.shard_id, result
                )
        for spec in self._project.services:
            container = self.service_container(spec.name)
            if not wait_until_ready(
                self._engine, container, spec, sleep=self._sleep, clock=self._clock
            ):
                raise _infra_error(
                    f"Starting {spec.name} failed: not ready after {spec.warmup:g}s",
                    self.shard_id,
                )
        self._transition(ShardPhase.SERVICES_READY)

    def run_migration(self) -> None:
        """Prepare this shard's database schema inside a throwaway sandbox."""
        self._transition(ShardPhase.MIGRATION_RUNNING)
        result = self._engine.run(
            self._names.image,
            ["sh", "-c", self._project.migration_command],
            remove=True,
            env=self.sandbox_env(),
            links=self.links(),
        )
        if not result.ok:
            raise _infra_error(f"Migrating DB failed: {result.describe()}", self.shard_id, result)
        self._transition(ShardPhase.MIGRATION_DONE)

    def run_tests(self, command: Sequence[str]) -> CommandResult:
        """Run the test command in the named sandbox; the result is not judged here."""
        self._transition(ShardPhase.TEST_RUNNING)
        return self._engine.run(
            self._names.image,
            command,
            name=self.sandbox,
            env=self.sandbox_env(),
            links=self.links(),
        )

    def complete(self, kind: OutcomeKind) -> None:
        with self._lock:
            if self._phase in (ShardPhase.COMPLETED, ShardPhase.TORN_DOWN):
                raise ValueError(f"Run {self.shard_id} already completed")
            if kind != OutcomeKind.INFRA_FAILURE and self._phase != ShardPhase.TEST_RUNNING:
                raise ValueError(f"Run {self.shard_id} cannot complete as {kind.value} from {self._phase}")
            if kind == OutcomeKind.INFRA_FAILURE and self._phase not in _PRE_TEST_PHASES:
                raise ValueError(f"Run {self.shard_id} reached tests; not an infra failure")
            self._phase = ShardPhase.COMPLETED
            self._completion = kind

    def teardown(self) -> None:
        """Force-remove every container of this shard; never raises."""
        self._engine.remove(*self.resources())
        with self._lock:
            if self._phase == ShardPhase.COMPLETED:
                self._phase = ShardPhase.TORN_DOWN
