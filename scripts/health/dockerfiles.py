"""
scripts/health/dockerfiles.py — Dockerfile presence and build-order checks.

TypeScript services need their dev dependencies (tsc) during `npm run build`,
so their images must do a full `npm install`, build, and only then prune.
The three commands are checked by first occurrence in the file text.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from config.stack import (
    DEPLOYED_SERVICES,
    TYPESCRIPT_DOCKERFILE_FORBIDDEN,
    TYPESCRIPT_DOCKERFILE_REQUIRED,
    DeployedService,
)
from scripts.health import CheckResult

STAGE = "2-dockerfiles"


def check_dockerfiles(
    root: Path,
    services: Iterable[DeployedService] = DEPLOYED_SERVICES,
) -> list[CheckResult]:
    return [_check_dockerfile(root, service) for service in services]


def _check_dockerfile(root: Path, service: DeployedService) -> CheckResult:
    name = f"{service.name} Dockerfile"
    path = root / service.dockerfile
    if not path.is_file():
        return CheckResult(STAGE, name, False, f"Missing Dockerfile: {service.dockerfile}")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return CheckResult(STAGE, name, False, f"could not read {service.dockerfile}", detail=str(exc))

    if not service.typescript:
        return CheckResult(STAGE, name, True, f"{service.dockerfile} present")

    problems = [f"missing '{line}'" for line in TYPESCRIPT_DOCKERFILE_REQUIRED if line not in text]
    problems += [
        f"contains '{line}' (dev dependencies needed for the build)"
        for line in TYPESCRIPT_DOCKERFILE_FORBIDDEN
        if line in text
    ]
    if not problems:
        problems = _order_problems(text)
    if problems:
        return CheckResult(STAGE, name, False, f"{service.dockerfile}: " + "; ".join(problems))
    return CheckResult(STAGE, name, True, "installs, builds, then prunes dev dependencies")


def _order_problems(text: str) -> list[str]:
    """Required lines must first appear in the order they are listed."""
    positions = [(text.index(line), line) for line in TYPESCRIPT_DOCKERFILE_REQUIRED]
    return [
        f"'{later}' appears before '{earlier}'"
        for (earlier_pos, earlier), (later_pos, later) in zip(positions, positions[1:])
        if later_pos < earlier_pos
    ]
