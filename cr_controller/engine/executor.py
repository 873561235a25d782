"""Run one shard end-to-end and classify the outcome."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence

from cr_catalog.models import Shard
from cr_common.errors import (
    BestEffortError,
    CRError,
    ShardInfraError,
    ShardTestError,
    error_to_payload,
)
from cr_controller.adapters.container_engine import ContainerEngine
from cr_controller.engine.lifecycle import ServiceLifecycle
from cr_controller.models.config import ProjectConfig, SuiteSpec
from cr_controller.models.naming import RunNames
from cr_controller.models.types import OutcomeKind, RunOutcome
from cr_controller.ui_interfaces import NoOpUIAdapter, UIAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShardJob:
    """A shard id with the exact test command and report paths it runs with."""

    shard_id: str
    command: tuple[str, ...]
    report_src: str
    report_dest: str


def shard_job(shard: Shard, suite: SuiteSpec, tag_tokens: Iterable[str] = ()) -> ShardJob:
    """Build the job for a partitioned shard: template, tag selectors, then files."""
    command = list(suite.command)
    for token in tag_tokens:
        command.extend(["--tags", token])
    command.extend(shard.paths)
    return ShardJob(
        shard_id=shard.shard_id,
        command=tuple(command),
        report_src=suite.report_src,
        report_dest=f"{suite.report_dest}/{shard.shard_id}",
    )


def baseline_job(suite: SuiteSpec) -> ShardJob:
    """The non-sharded suite runs under its own name with an unmodified template."""
    return ShardJob(
        shard_id=suite.name,
        command=tuple(suite.command),
        report_src=suite.report_src,
        report_dest=suite.report_dest,
    )


class ShardExecutor:
    """Executes shard jobs; each call owns one ServiceLifecycle."""

    def __init__(
        self,
        *,
        engine: ContainerEngine,
        names: RunNames,
        project: ProjectConfig,
        commit_on_failure: bool = False,
        ui: UIAdapter | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._engine = engine
        self._names = names
        self._project = project
        self._commit = commit_on_failure
        self._ui = ui or NoOpUIAdapter()
        self._sleep = sleep
        self._clock = clock

    def lifecycle_for(self, shard_id: str) -> ServiceLifecycle:
        return ServiceLifecycle(
            shard_id,
            engine=self._engine,
            names=self._names,
            project=self._project,
            sleep=self._sleep,
            clock=self._clock,
        )

    def resources_for(self, shard_ids: Sequence[str]) -> list[str]:
        """Every container name the given shards may create."""
        resources: list[str] = []
        for shard_id in shard_ids:
            resources.extend(self.lifecycle_for(shard_id).resources())
        return resources

    def execute(self, job: ShardJob) -> RunOutcome:
        start = self._clock()
        lifecycle = self.lifecycle_for(job.shard_id)
        # Leftovers from a crashed run with the same build id.
        lifecycle.teardown()
        try:
            try:
                lifecycle.start_backing_services()
                lifecycle.run_migration()
            except ShardInfraError as exc:
                lifecycle.complete(OutcomeKind.INFRA_FAILURE)
                self._ui.show_error(f"Run {job.shard_id} failed: {exc}")
                return self._outcome(
                    job,
                    start,
                    OutcomeKind.INFRA_FAILURE,
                    str(exc),
                    str(exc.context.get("stdout") or ""),
                    str(exc.context.get("stderr") or ""),
                    error=exc,
                )

            result = lifecycle.run_tests(job.command)
            self._copy_reports(lifecycle, job)

            if result.ok:
                lifecycle.complete(OutcomeKind.SUCCESS)
                self._ui.show_success(f"Run {job.shard_id} succeeded")
                return self._outcome(job, start, OutcomeKind.SUCCESS, "", result.stdout, result.stderr)

            lifecycle.complete(OutcomeKind.TEST_FAILURE)
            failure = ShardTestError(
                "Run failed",
                context={
                    "shard": job.shard_id,
                    "command": list(job.command),
                    "returncode": result.returncode,
                },
            )
            logger.info("Run %s failed: %s", job.shard_id, error_to_payload(failure))
            if self._commit:
                self._ui.show_warning(f"Run {job.shard_id} failed, committing as {lifecycle.sandbox}")
                self._commit_sandbox(lifecycle)
            else:
                self._ui.show_warning(f"Run {job.shard_id} failed")
            return self._outcome(
                job,
                start,
                OutcomeKind.TEST_FAILURE,
                str(failure),
                result.stdout,
                result.stderr,
                error=failure,
            )
        finally:
            lifecycle.teardown()

    def _outcome(
        self,
        job: ShardJob,
        start: float,
        kind: OutcomeKind,
        message: str,
        stdout: str,
        stderr: str,
        error: CRError | None = None,
    ) -> RunOutcome:
        return RunOutcome(
            shard_id=job.shard_id,
            success=kind == OutcomeKind.SUCCESS,
            message=message,
            duration=self._clock() - start,
            stdout=stdout,
            stderr=stderr,
            kind=kind,
            error=error.to_dict() if error is not None else None,
        )

    def _copy_reports(self, lifecycle: ServiceLifecycle, job: ShardJob) -> None:
        src = f"{self._project.app_dir.rstrip('/')}/{job.report_src}"
        try:
            Path(job.report_dest).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._best_effort(f"Cannot create report directory {job.report_dest}", job.shard_id, exc)
            return
        result = self._engine.copy_out(lifecycle.sandbox, src, job.report_dest)
        if not result.ok:
            self._best_effort(
                f"Copying reports from {lifecycle.sandbox}:{src} failed: {result.describe()}",
                job.shard_id,
            )

    def _commit_sandbox(self, lifecycle: ServiceLifecycle) -> None:
        result = self._engine.commit(lifecycle.sandbox, lifecycle.sandbox)
        if not result.ok:
            self._best_effort(
                f"Committing {lifecycle.sandbox} failed: {result.describe()}", lifecycle.shard_id
            )

    def _best_effort(self, message: str, shard_id: str, cause: Exception | None = None) -> None:
        error = BestEffortError(message, context={"shard": shard_id}, cause=cause)
        logger.warning("Best-effort step failed: %s", error_to_payload(error))
