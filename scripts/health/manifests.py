"""
scripts/health/manifests.py — Compose, .env and package.json content checks.

These are textual/structural checks on the checkout only; nothing is run.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from config.stack import DEPLOYED_SERVICES, REQUIRED_ENV_VARS, DeployedService
from scripts.health import CheckResult

STAGE_COMPOSE = "3-compose"
STAGE_CONFIG = "4-config"


def check_compose(
    compose_path: Path,
    services: Iterable[DeployedService] = DEPLOYED_SERVICES,
) -> list[CheckResult]:
    """Every service has a block and a build context pointing at its submodule."""
    if not compose_path.is_file():
        return [CheckResult(STAGE_COMPOSE, "Compose file", False, f"Missing {compose_path.name}")]

    try:
        text = compose_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return [
            CheckResult(
                STAGE_COMPOSE,
                "Compose file",
                False,
                f"could not read {compose_path.name}",
                detail=str(exc),
            )
        ]

    results = []
    for service in services:
        expected = [f"{service.name}:", f"context: ./{service.submodule}"]
        missing = [snippet for snippet in expected if snippet not in text]
        results.append(
            CheckResult(
                STAGE_COMPOSE,
                f"{service.name} compose service",
                not missing,
                "defined with build context"
                if not missing
                else f"{compose_path.name} missing " + ", ".join(f"'{m}'" for m in missing),
            )
        )
    return results


def _load_compose_services(compose_path: Path) -> dict[str, Any]:
    data = yaml.safe_load(compose_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError("top level is not a mapping")
    services = data.get("services") or {}
    if not isinstance(services, dict):
        raise ValueError("'services' is not a mapping")
    return services


def _dockerfile_has_healthcheck(path: Path) -> bool:
    try:
        return path.is_file() and "HEALTHCHECK" in path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return False


def check_compose_healthchecks(
    root: Path,
    compose_path: Path,
    services: Iterable[DeployedService] = DEPLOYED_SERVICES,
) -> list[CheckResult]:
    """Report where each service's healthcheck comes from.

    Informational only: every result passes. A service without one never
    shows `unhealthy` in `compose ps`, so the runtime check can only prove
    it started.
    """
    name = "Compose healthchecks"
    if not compose_path.is_file():
        return [CheckResult(STAGE_COMPOSE, name, True, f"not inspected ({compose_path.name} missing)")]
    try:
        declared = _load_compose_services(compose_path)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        return [
            CheckResult(
                STAGE_COMPOSE,
                name,
                True,
                f"not inspected (could not parse {compose_path.name})",
                detail=str(exc),
            )
        ]

    results = []
    for service in services:
        label = f"{service.name} healthcheck"
        declaration = declared.get(service.name)
        healthcheck = declaration.get("healthcheck") if isinstance(declaration, dict) else None
        if isinstance(healthcheck, dict) and not healthcheck.get("disable", False):
            message = "declared in compose"
        elif _dockerfile_has_healthcheck(root / service.dockerfile):
            message = "declared in Dockerfile"
        else:
            message = "none declared (runtime check cannot see unhealthy)"
        results.append(CheckResult(STAGE_COMPOSE, label, True, message))
    return results


def check_env_file(
    env_path: Path,
    required: Iterable[str] = REQUIRED_ENV_VARS,
) -> list[CheckResult]:
    """Key presence only; values are never inspected."""
    if not env_path.is_file():
        return [CheckResult(STAGE_CONFIG, "Env file", False, f"Missing {env_path.name} file")]

    try:
        text = env_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return [
            CheckResult(
                STAGE_CONFIG,
                "Env file",
                False,
                f"could not read {env_path.name}",
                detail=str(exc),
            )
        ]
    return [
        CheckResult(
            STAGE_CONFIG,
            var,
            var in text,
            "present" if var in text else f"Missing environment variable: {var}",
        )
        for var in required
    ]


def check_package_manifests(
    root: Path,
    services: Iterable[DeployedService] = DEPLOYED_SERVICES,
) -> list[CheckResult]:
    return [
        _check_package_manifest(root, service) for service in services if service.has_package_json
    ]


def _check_package_manifest(root: Path, service: DeployedService) -> CheckResult:
    name = f"{service.submodule} package.json"
    path = root / service.package_json
    if not path.is_file():
        return CheckResult(STAGE_CONFIG, name, False, f"Missing package.json: {service.package_json}")

    try:
        package = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        return CheckResult(
            STAGE_CONFIG,
            name,
            False,
            f"could not parse {service.package_json}",
            detail=str(exc),
        )
    if not isinstance(package, dict):
        return CheckResult(STAGE_CONFIG, name, False, f"{service.package_json} is not an object")

    if service.typescript:
        problems = []
        scripts = package.get("scripts")
        if not isinstance(scripts, dict) or "build" not in scripts:
            problems.append(f"Missing build script in {service.submodule}")
        dev_dependencies = package.get("devDependencies")
        if not isinstance(dev_dependencies, dict) or "typescript" not in dev_dependencies:
            problems.append(f"Missing typescript in {service.submodule}")
        if problems:
            return CheckResult(STAGE_CONFIG, name, False, "; ".join(problems))
        return CheckResult(STAGE_CONFIG, name, True, "build script and typescript declared")

    return CheckResult(STAGE_CONFIG, name, True, "valid JSON")
