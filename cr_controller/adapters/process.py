"""Run external commands and capture their output."""

from __future__ import annotations

import logging
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from typing import IO, Callable, Sequence

logger = logging.getLogger(__name__)

MISSING_EXECUTABLE_RC = 127


@dataclass
class CommandResult:
    """Exit status and captured streams of one external command."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def describe(self) -> str:
        return f"exit status {self.returncode}"


def _pump(stream: IO[str], sink: IO[str], lines: list[str]) -> None:
    for line in stream:
        lines.append(line)
        sink.write(line)
        sink.flush()


@dataclass
class CommandRunner:
    """Execute commands to completion; never raises on a non-zero exit.

    In verbose mode the command line is echoed and both streams are teed to
    the terminal while still being captured.
    """

    verbose: bool = False
    out: IO[str] = field(default_factory=lambda: sys.stdout)
    err: IO[str] = field(default_factory=lambda: sys.stderr)
    echo: Callable[[str], None] | None = None

    def run(self, args: Sequence[str]) -> CommandResult:
        argv = [str(arg) for arg in args]
        logger.debug("Running %s", " ".join(argv))
        if self.verbose:
            (self.echo or self._default_echo)(f"Running {' '.join(argv)}")
        try:
            if self.verbose:
                return self._run_tee(argv)
            proc = subprocess.run(
                argv,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            logger.debug("Cannot execute %s: %s", argv[0], exc)
            return CommandResult(argv, MISSING_EXECUTABLE_RC, "", str(exc))
        return CommandResult(argv, proc.returncode, proc.stdout or "", proc.stderr or "")

    def _default_echo(self, message: str) -> None:
        self.out.write(message + "\n")
        self.out.flush()

    def _run_tee(self, argv: list[str]) -> CommandResult:
        process = subprocess.Popen(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )
        out_lines: list[str] = []
        err_lines: list[str] = []
        pumps = [
            threading.Thread(target=_pump, args=(process.stdout, self.out, out_lines), daemon=True),
            threading.Thread(target=_pump, args=(process.stderr, self.err, err_lines), daemon=True),
        ]
        for pump in pumps:
            pump.start()
        returncode = process.wait()
        for pump in pumps:
            pump.join()
        return CommandResult(argv, returncode, "".join(out_lines), "".join(err_lines))
