"""
scripts/commands.py — Narrow wrapper around external git / compose commands.

Checks depend on the CommandExecutor protocol rather than on subprocess
directly, so unit tests can hand them a scripted fake.
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass
class CommandResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandError(RuntimeError):
    """A command exited non-zero, timed out, or could not be started."""

    def __init__(
        self,
        args: list[str],
        reason: str,
        cwd: str | Path | None = None,
        returncode: int | None = None,
        output: str = "",
    ) -> None:
        self.args_list = list(args)
        self.reason = reason
        self.cwd = str(cwd) if cwd is not None else None
        self.returncode = returncode
        self.output = output
        where = f" (in {self.cwd})" if self.cwd else ""
        super().__init__(f"`{shlex.join(self.args_list)}`{where} {reason}")


class CommandExecutor(Protocol):
    def run(
        self,
        args: list[str],
        cwd: str | Path | None = None,
        timeout: float | None = None,
    ) -> CommandResult: ...


class SubprocessExecutor:
    """Runs commands with subprocess.run and raises CommandError on any failure."""

    def run(
        self,
        args: list[str],
        cwd: str | Path | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        try:
            result = subprocess.run(
                args,
                cwd=str(cwd) if cwd is not None else None,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise CommandError(args, f"timed out ({timeout:g}s)", cwd=cwd) from exc
        except OSError as exc:
            raise CommandError(args, f"could not start: {exc}", cwd=cwd) from exc

        if result.returncode != 0:
            output = (result.stderr or result.stdout).strip()
            raise CommandError(
                args,
                f"failed with exit code {result.returncode}"
                + (f": {output[:500]}" if output else ""),
                cwd=cwd,
                returncode=result.returncode,
                output=output,
            )
        return CommandResult(list(args), result.returncode, result.stdout, result.stderr)
