"""Top-level run: prepare, build, select, shard, fan out, join, report."""

from __future__ import annotations

import logging
import os
import random
import shutil
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from cr_catalog.catalog import FeatureCatalog
from cr_catalog.models import ScenarioFile, Shard
from cr_catalog.parser import ScenarioParser
from cr_catalog.sharder import ShardPolicy, build_shards
from cr_catalog.tags import TagRuleSet
from cr_common.errors import ConfigurationError, SetupError, ShardInfraError, wrap_error
from cr_controller.adapters.container_engine import ContainerEngine
from cr_controller.adapters.process import CommandRunner
from cr_controller.engine.executor import ShardExecutor, ShardJob, baseline_job, shard_job
from cr_controller.engine.interrupts import InterruptGuard
from cr_controller.models.config import ProjectConfig, RunOptions, load_project_config
from cr_controller.models.naming import RunNames
from cr_controller.models.types import OutcomeKind, RunOutcome, RunSummary
from cr_controller.services.readiness import wait_until_ready
from cr_controller.services.results import SUMMARY_COLUMNS, ResultAggregator, summary_rows
from cr_controller.ui_interfaces import NoOpUIAdapter, UIAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunReport:
    """Final state of a run that got past setup."""

    summary: RunSummary
    shards: tuple[Shard, ...]

    @property
    def success(self) -> bool:
        return self.summary.success

    @property
    def exit_code(self) -> int:
        return 0 if self.summary.success else 1


class RunCoordinator:
    """Orchestrates one build from setup to exit status.

    Setup failures raise SetupError before any shard starts. Once shards are
    running, failures are recorded per shard and only surface in the report.
    """

    def __init__(
        self,
        options: RunOptions,
        *,
        project: ProjectConfig | None = None,
        runner: CommandRunner | None = None,
        ui: UIAdapter | None = None,
        parser: ScenarioParser | None = None,
        policy: ShardPolicy = ShardPolicy.WEIGHTED,
        rng: random.Random | None = None,
        enable_signals: bool = True,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.options = options
        self._project = project
        self._runner = runner or CommandRunner(verbose=options.verbose)
        self._ui = ui or NoOpUIAdapter()
        self._parser = parser
        self._policy = policy
        self._rng = rng
        self._enable_signals = enable_signals
        self._sleep = sleep
        self._clock = clock
        self.names = RunNames(options.build_name, options.build_id)
        self.engine = ContainerEngine(self._runner, options.engine)

    @property
    def project(self) -> ProjectConfig:
        if self._project is None:
            raise ConfigurationError("Project config not loaded yet")
        return self._project

    def run(self) -> RunReport:
        opts = self.options
        self._ui.show_topic(f"Starting build {opts.build_id} of {opts.build_name}")
        self._enter_workdir()
        if self._project is None:
            self._project = load_project_config(opts.config_path, Path.cwd())

        self._ui.show_topic("Preparing config files and cleaning old reports")
        self._prepare_workspace()

        self._ui.show_topic("Building base image")
        self._build_image()

        self._ui.show_topic("Selecting features")
        files = self._select_features()
        if opts.verbose:
            self._ui.show_table(
                "Features", ["PATH", "WEIGHT"], [[item.path, str(item.weight)] for item in files]
            )
        shards = build_shards(files, opts.concurrency, policy=self._policy, rng=self._rng)

        executor = ShardExecutor(
            engine=self.engine,
            names=self.names,
            project=self.project,
            commit_on_failure=opts.commit,
            ui=self._ui,
            sleep=self._sleep,
            clock=self._clock,
        )
        jobs = self._jobs(shards)

        self._ui.show_topic("Starting database")
        try:
            self._start_database()
            guard = InterruptGuard(
                lambda: self.emergency_cleanup(executor, jobs),
                enable_signals=self._enable_signals,
                on_interrupt=lambda: self._ui.show_error("CI runner killed !"),
            )
            with guard:
                baseline = "" if self.project.baseline_suite is None else " + baseline run"
                self._ui.show_topic(f"Running build in {len(shards)} runs{baseline}")
                summary = self._fan_out(executor, jobs)
        finally:
            self.engine.remove(self.names.database_container)

        self._report(summary)
        return RunReport(summary=summary, shards=tuple(shards))

    def _enter_workdir(self) -> None:
        path = Path(self.options.path).resolve()
        self._ui.show_info(f"Changing working directory to {path}")
        try:
            os.chdir(path)
        except OSError as exc:
            raise SetupError(
                f"Cannot change working directory to {path}: {exc}",
                context={"path": path},
                cause=exc,
            ) from exc

    def _prepare_workspace(self) -> None:
        for src, dest in self.project.renames.items():
            try:
                os.replace(src, dest)
            except FileNotFoundError:
                logger.debug("No %s to rename", src)
            except OSError as exc:
                logger.warning("Cannot rename %s to %s: %s", src, dest, exc)
        for directory in self.project.clean_dirs:
            shutil.rmtree(directory, ignore_errors=True)

    def _build_image(self) -> None:
        self.engine.ensure_available()
        result = self.engine.build(self.names.image, ".")
        if not result.ok:
            raise SetupError(
                f"Building image {self.names.image} failed: {result.describe()}\n"
                f"{result.stdout}\n{result.stderr}",
                context={"image": self.names.image},
            )

    def _select_features(self) -> list[ScenarioFile]:
        rules = TagRuleSet.from_tokens(self.options.tags, self.options.slow_tags)
        catalog = FeatureCatalog(
            self.project.features_dir, suffix=self.project.feature_suffix, parser=self._parser
        )
        return catalog.select(rules)

    def _jobs(self, shards: list[Shard]) -> list[ShardJob]:
        jobs: list[ShardJob] = []
        if self.project.baseline_suite is not None:
            jobs.append(baseline_job(self.project.baseline_suite))
        jobs.extend(
            shard_job(shard, self.project.shard_suite, self.options.tags) for shard in shards
        )
        return jobs

    def _start_database(self) -> None:
        spec = self.project.database
        container = self.names.database_container
        self.engine.remove(container)
        result = self.engine.run_detached(container, spec.image, env=spec.env)
        if not result.ok:
            raise SetupError(
                f"Starting DB failed: {result.describe()}\n{result.stdout}\n{result.stderr}",
                context={"container": container, "image": spec.image},
            )
        if not wait_until_ready(self.engine, container, spec, sleep=self._sleep, clock=self._clock):
            raise SetupError(
                f"Starting DB failed: not ready after {spec.warmup:g}s",
                context={"container": container},
            )

    def emergency_cleanup(self, executor: ShardExecutor, jobs: list[ShardJob]) -> None:
        """Remove the shared database and every shard container, started or not."""
        self.engine.remove(
            self.names.database_container,
            *executor.resources_for([job.shard_id for job in jobs]),
        )

    def _fan_out(self, executor: ShardExecutor, jobs: list[ShardJob]) -> RunSummary:
        results = ResultAggregator()
        threads = [
            threading.Thread(
                target=self._run_job,
                args=(executor, job, results),
                name=f"cr-run-{job.shard_id}",
                daemon=True,
            )
            for job in jobs
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return results.finalize()

    def _run_job(self, executor: ShardExecutor, job: ShardJob, results: ResultAggregator) -> None:
        start = self._clock()
        try:
            outcome = executor.execute(job)
        except Exception as exc:
            logger.exception("Run %s crashed", job.shard_id)
            error = wrap_error(
                ShardInfraError,
                f"Runner error: {exc}",
                context={"shard": job.shard_id},
                cause=exc,
            )
            outcome = RunOutcome(
                shard_id=job.shard_id,
                success=False,
                message=str(error),
                duration=self._clock() - start,
                kind=OutcomeKind.INFRA_FAILURE,
                error=error.to_dict(),
            )
        results.append(outcome)

    def _report(self, summary: RunSummary) -> None:
        self._ui.show_topic("Results")
        self._ui.show_table("Results", SUMMARY_COLUMNS, summary_rows(summary))
        for outcome in summary.failures:
            self._ui.show_output(outcome.shard_id, outcome.stdout, outcome.stderr)
