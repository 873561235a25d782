"""Controller facade for orchestration components.

Re-exports the types a caller needs to configure and launch a sharded run.
"""

from cr_controller.api import (
    CommandRunner,
    ProjectConfig,
    RunCoordinator,
    RunOptions,
    RunOutcome,
    RunReport,
    RunSummary,
)

__all__ = [
    "CommandRunner",
    "ProjectConfig",
    "RunCoordinator",
    "RunOptions",
    "RunOutcome",
    "RunReport",
    "RunSummary",
]
