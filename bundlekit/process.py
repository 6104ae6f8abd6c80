"""Process execution for prerequisite fixes, build steps and container runs."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Protocol

from bundlekit.errors import CommandError


class Runner(Protocol):
    def run(self, argv: list[str], cwd: Path | str | None = None) -> str:
        """Run argv in cwd and return its combined output.

        Raises CommandError (carrying the output) on a non-zero exit.
        """


def _decode(output: bytes | str | None) -> str:
    # build tools may print anything; undecodable bytes must not lose the log
    if output is None:
        return ""
    if isinstance(output, str):
        return output
    return output.decode("utf-8", errors="replace")


class ProcessRunner:
    """Runs commands with subprocess, capturing stdout and stderr together.

    Commands block until they exit. Pass ``timeout`` to bound each command;
    the default of None waits indefinitely.
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    def run(self, argv: list[str], cwd: Path | str | None = None) -> str:
        if cwd is not None and not Path(cwd).is_dir():
            raise CommandError(argv, 127, f"working directory {cwd} does not exist")

        try:
            proc = subprocess.run(
                argv,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise CommandError(argv, 127, f"{argv[0]}: command not found") from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(argv, -1, _decode(e.output) + f"\ntimed out after {self.timeout}s") from e

        output = _decode(proc.stdout)
        if proc.returncode != 0:
            raise CommandError(argv, proc.returncode, output)
        return output
