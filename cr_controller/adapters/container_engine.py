"""Thin wrapper over the docker/podman CLI."""

from __future__ import annotations

import logging
import shutil
from typing import Mapping, Sequence

from cr_common.errors import SetupError
from cr_controller.adapters.process import CommandResult, CommandRunner

logger = logging.getLogger(__name__)


def _env_args(env: Mapping[str, str] | None) -> list[str]:
    args: list[str] = []
    for key, value in (env or {}).items():
        args.extend(["-e", f"{key}={value}"])
    return args


def _link_args(links: Sequence[tuple[str, str]] | None) -> list[str]:
    args: list[str] = []
    for container, alias in links or ():
        args.extend(["--link", f"{container}:{alias}"])
    return args


class ContainerEngine:
    """Build, run, inspect and remove containers through the engine CLI."""

    def __init__(self, runner: CommandRunner, engine: str = "docker") -> None:
        self.runner = runner
        self.engine = engine

    def ensure_available(self) -> None:
        """Verify the container engine is available."""
        if shutil.which(self.engine) is None:
            raise SetupError(f"{self.engine} not found in PATH", context={"engine": self.engine})

    def build(self, tag: str, context: str = ".") -> CommandResult:
        return self.runner.run([self.engine, "build", "-t", tag, context])

    def run_detached(
        self, name: str, image: str, *, env: Mapping[str, str] | None = None
    ) -> CommandResult:
        return self.runner.run(
            [self.engine, "run", "-d", "--name", name, *_env_args(env), image]
        )

    def run(
        self,
        image: str,
        command: Sequence[str],
        *,
        name: str | None = None,
        remove: bool = False,
        env: Mapping[str, str] | None = None,
        links: Sequence[tuple[str, str]] | None = None,
    ) -> CommandResult:
        args = [self.engine, "run"]
        if remove:
            args.append("--rm")
        if name:
            args.extend(["--name", name])
        args.extend(_env_args(env))
        args.extend(_link_args(links))
        args.append(image)
        args.extend(command)
        return self.runner.run(args)

    def exec(self, name: str, command: Sequence[str]) -> CommandResult:
        return self.runner.run([self.engine, "exec", name, *command])

    def copy_out(self, name: str, src: str, dest: str) -> CommandResult:
        return self.runner.run([self.engine, "cp", f"{name}:{src}", dest])

    def commit(self, name: str, tag: str) -> CommandResult:
        return self.runner.run([self.engine, "commit", name, tag])

    def remove(self, *names: str) -> CommandResult:
        """Force-remove containers and their volumes.

        Absent containers make the CLI exit non-zero while the present ones
        are still removed, so the result is informational only.
        """
        result = self.runner.run([self.engine, "rm", "-f", "-v", *names])
        if not result.ok:
            logger.debug("rm of %s: %s %s", ", ".join(names), result.describe(), result.stderr.strip())
        return result
