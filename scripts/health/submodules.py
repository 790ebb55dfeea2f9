"""
scripts/health/submodules.py — Git submodule presence and freshness checks.

Freshness compares each submodule's checked-out HEAD with the tip of a
single configured remote branch (SUBMODULE_REMOTE/SUBMODULE_BRANCH). A
submodule that tracks a different default branch will be reported as behind.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from config.stack import DEPLOYED_SERVICES
from scripts.commands import CommandError, CommandExecutor
from scripts.health import CheckResult

if TYPE_CHECKING:
    from config.settings import Settings

STAGE = "1-submodules"


def _submodule_names() -> list[str]:
    return [s.submodule for s in DEPLOYED_SERVICES]


def check_presence(root: Path, submodules: Iterable[str] | None = None) -> list[CheckResult]:
    results = []
    for name in submodules if submodules is not None else _submodule_names():
        path = root / name
        if not path.exists():
            results.append(CheckResult(STAGE, name, False, f"Missing submodule: {name}"))
        elif not (path / ".git").exists():
            # a checked-out submodule has a .git *file* pointing into the superproject
            results.append(CheckResult(STAGE, name, False, f"Submodule not initialized: {name}"))
        else:
            results.append(CheckResult(STAGE, name, True, "present and initialized"))
    return results


def check_freshness(
    cfg: Settings,
    executor: CommandExecutor,
    submodules: Iterable[str] | None = None,
) -> list[CheckResult]:
    results = []
    for name in submodules if submodules is not None else _submodule_names():
        results.append(_check_one(cfg, executor, name))
    return results


def _check_one(cfg: Settings, executor: CommandExecutor, name: str) -> CheckResult:
    cwd = cfg.stack_root / name
    label = f"{name} freshness"
    timeout = cfg.GIT_TIMEOUT_SECONDS
    try:
        local = executor.run(["git", "rev-parse", "HEAD"], cwd=cwd, timeout=timeout).stdout.strip()
        executor.run(["git", "fetch", cfg.SUBMODULE_REMOTE], cwd=cwd, timeout=timeout)
        remote = executor.run(
            ["git", "rev-parse", cfg.remote_ref], cwd=cwd, timeout=timeout
        ).stdout.strip()
    except CommandError as exc:
        return CheckResult(
            STAGE,
            label,
            False,
            f"Failed to check submodule {name}: {exc}",
            detail=exc.output or None,
        )

    if local != remote:
        return CheckResult(
            STAGE,
            label,
            False,
            f"Submodule {name} is behind remote",
            detail=f"HEAD {local[:12]} != {cfg.remote_ref} {remote[:12]}",
        )
    return CheckResult(STAGE, label, True, f"at {cfg.remote_ref} ({local[:12]})")
