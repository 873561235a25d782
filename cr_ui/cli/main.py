"""
Command-line interface for cirunner.

Builds the project image, splits the scenario suite into weighted shards and
runs every shard in its own set of containers next to a baseline suite.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError

from cr_common.config.env import parse_list_env
from cr_common.errors import RunInterruptedError, SetupError, error_to_payload
from cr_common.logging import configure_logging
from cr_controller.api import CommandRunner, RunCoordinator, RunOptions
from cr_ui.adapters.console import ConsoleUIAdapter

EXIT_FAILURE = 1
EXIT_SETUP = 2

app = typer.Typer(
    help="Run a test suite as weighted, containerized shards in parallel.",
    add_completion=False,
)


def _env_list(values: Optional[List[str]], env_var: str) -> List[str]:
    if values:
        return list(values)
    return parse_list_env(os.environ.get(env_var))


@app.command()
def run(
    path: Path = typer.Option(
        Path("./"),
        "--path",
        help="Path to execute the build in.",
    ),
    name: str = typer.Option(
        "",
        "--name",
        envvar="JOB_NAME",
        help="Name for this build (lower-cased; also the image tag).",
    ),
    build_id: str = typer.Option(
        "",
        "--id",
        envvar="BUILD_ID",
        help="Id for this build (defaults to 4 byte random hex).",
    ),
    tags: Optional[List[str]] = typer.Option(
        None,
        "--tags",
        help="Tags to filter features on; prefix with ~ to reject. Env: CUCUMBER_TAGS.",
    ),
    slow_tags: Optional[List[str]] = typer.Option(
        None,
        "--slowtags",
        help="Tags that double a feature's weight. Env: CUCUMBER_SLOW_TAGS.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Echo commands and stream their output.",
    ),
    commit: bool = typer.Option(
        False,
        "--commit",
        help="Commit the sandbox of a failed run for postmortem inspection.",
    ),
    max_runs: int = typer.Option(
        0,
        "--maxruns",
        min=0,
        help="Maximum concurrent runs; defaults to the number of CPUs.",
    ),
    engine: str = typer.Option(
        "docker",
        "--engine",
        help="Container engine CLI to use (docker or podman).",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Project config file; defaults to cirunner.yml in the build path.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging.",
    ),
) -> None:
    """Build, shard and run the suite; exit 0 only if every run succeeded."""
    configure_logging(debug=debug, force=True)
    ui = ConsoleUIAdapter()

    if not name.strip():
        ui.show_error("Must specify build name")
        raise typer.Exit(EXIT_SETUP)

    try:
        options = RunOptions(
            path=path,
            build_name=name,
            build_id=build_id,
            tags=_env_list(tags, "CUCUMBER_TAGS"),
            slow_tags=_env_list(slow_tags, "CUCUMBER_SLOW_TAGS"),
            verbose=verbose,
            commit=commit,
            max_runs=max_runs,
            engine=engine,
            config_path=config,
        )
    except ValidationError as exc:
        ui.show_error(f"Invalid options: {exc}")
        raise typer.Exit(EXIT_SETUP)

    coordinator = RunCoordinator(
        options,
        runner=CommandRunner(verbose=options.verbose, echo=ui.show_info),
        ui=ui,
    )
    try:
        report = coordinator.run()
    except SetupError as exc:
        ui.show_error(str(exc))
        if debug:
            ui.show_info(str(error_to_payload(exc)))
        raise typer.Exit(EXIT_SETUP)
    except RunInterruptedError:
        raise typer.Exit(EXIT_FAILURE)

    raise typer.Exit(report.exit_code)


def main() -> None:
    """Console script entrypoint (Typer app)."""
    app()


if __name__ == "__main__":
    main()
