"""
scripts/health/stack.py — Build and start the real compose stack.

These are the only checks with side effects: they build images, start
containers, and always tear the stack down again.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from scripts.commands import CommandError, CommandExecutor
from scripts.health import CheckResult

if TYPE_CHECKING:
    from config.settings import Settings

STAGE = "5-stack"
UNHEALTHY_MARKER = "unhealthy"


def check_build(cfg: Settings, executor: CommandExecutor) -> CheckResult:
    try:
        executor.run(
            cfg.compose_args + ["build", "--no-cache"],
            cwd=cfg.stack_root,
            timeout=cfg.BUILD_TIMEOUT_SECONDS,
        )
    except CommandError as exc:
        return CheckResult(STAGE, "Compose build", False, "build failed", detail=str(exc))
    return CheckResult(STAGE, "Compose build", True, "all images built (--no-cache)")


def check_runtime(
    cfg: Settings,
    executor: CommandExecutor,
    sleep: Callable[[float], None] | None = None,
) -> CheckResult:
    """Start the stack, wait for healthchecks to settle, inspect, tear down.

    Each step has its own timeout; the total is bounded by
    cfg.runtime_check_bound_seconds (130s with defaults).
    """
    name = "Stack runtime health"
    result: CheckResult
    try:
        executor.run(
            cfg.compose_args + ["up", "-d"],
            cwd=cfg.stack_root,
            timeout=cfg.STACK_UP_TIMEOUT_SECONDS,
        )
        (sleep or time.sleep)(cfg.STACK_WARMUP_SECONDS)
        status = executor.run(
            cfg.compose_args + ["ps"],
            cwd=cfg.stack_root,
            timeout=cfg.STACK_PS_TIMEOUT_SECONDS,
        ).stdout
        unhealthy = [ln.strip() for ln in status.splitlines() if UNHEALTHY_MARKER in ln]
        if unhealthy:
            result = CheckResult(
                STAGE,
                name,
                False,
                f"{len(unhealthy)} container(s) unhealthy after {cfg.STACK_WARMUP_SECONDS:g}s",
                detail="\n         ".join(unhealthy),
            )
        else:
            result = CheckResult(
                STAGE,
                name,
                True,
                f"no unhealthy containers after {cfg.STACK_WARMUP_SECONDS:g}s",
            )
    except CommandError as exc:
        result = CheckResult(STAGE, name, False, "could not start stack", detail=str(exc))
    finally:
        teardown_error = _teardown(cfg, executor)

    if teardown_error and result.passed:
        return CheckResult(STAGE, name, False, "stack healthy but teardown failed", detail=teardown_error)
    if teardown_error:
        result.detail = f"{result.detail or ''}\n         teardown also failed: {teardown_error}".strip()
    return result


def _teardown(cfg: Settings, executor: CommandExecutor) -> str | None:
    try:
        executor.run(
            cfg.compose_args + ["down"],
            cwd=cfg.stack_root,
            timeout=cfg.STACK_DOWN_TIMEOUT_SECONDS,
        )
    except CommandError as exc:
        return str(exc)
    return None
