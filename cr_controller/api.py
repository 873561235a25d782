"""Public controller API surface."""

from cr_controller.adapters.container_engine import ContainerEngine
from cr_controller.adapters.process import CommandResult, CommandRunner
from cr_controller.engine.coordinator import RunCoordinator, RunReport
from cr_controller.engine.executor import ShardExecutor, ShardJob, baseline_job, shard_job
from cr_controller.engine.interrupts import InterruptGuard
from cr_controller.engine.lifecycle import ServiceLifecycle, ShardPhase
from cr_controller.models.config import (
    PROJECT_CONFIG_NAME,
    ProjectConfig,
    RunOptions,
    ServiceSpec,
    SuiteSpec,
    load_project_config,
)
from cr_controller.models.naming import RunNames
from cr_controller.models.types import OutcomeKind, RunOutcome, RunSummary, SummaryRow
from cr_controller.services.readiness import wait_until_ready
from cr_controller.services.results import (
    SUMMARY_COLUMNS,
    ResultAggregator,
    format_duration,
    summary_rows,
)
from cr_controller.ui_interfaces import NoOpUIAdapter, UIAdapter

__all__ = [
    "CommandResult",
    "CommandRunner",
    "ContainerEngine",
    "InterruptGuard",
    "NoOpUIAdapter",
    "OutcomeKind",
    "PROJECT_CONFIG_NAME",
    "ProjectConfig",
    "ResultAggregator",
    "RunCoordinator",
    "RunNames",
    "RunOptions",
    "RunOutcome",
    "RunReport",
    "RunSummary",
    "SUMMARY_COLUMNS",
    "ServiceLifecycle",
    "ServiceSpec",
    "ShardExecutor",
    "ShardJob",
    "ShardPhase",
    "SuiteSpec",
    "SummaryRow",
    "UIAdapter",
    "baseline_job",
    "format_duration",
    "load_project_config",
    "shard_job",
    "summary_rows",
    "wait_until_ready",
]
