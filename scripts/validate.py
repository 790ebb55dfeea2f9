#!/usr/bin/env python3
"""
scripts/validate.py — Deployment validation for the CoachArtie checkout.

Catches the submodule and image-build problems that otherwise only show up
once a deploy is already failing. Each stage delegates to a check module in
scripts/health/.

Stages:
  1. Submodules     (present, initialized, at the tip of the tracked branch)
  2. Dockerfiles    (present; TypeScript images install → build → prune)
  3. Compose        (every service + build context, healthchecks declared)
  4. Config         (.env keys, package.json build script + typescript)
  5. Stack          (compose build --no-cache; up -d → ps → down)

Usage:
    python3 scripts/validate.py                 # reads .env from cwd
    python3 scripts/validate.py --skip-stack    # no image builds / containers

Importable (used by tests):
    from scripts.validate import run_validation
    results = run_validation(cfg, executor, include_stack=False)
"""

from __future__ import annotations

import argparse
import pathlib
import sys
from collections.abc import Callable, Sequence

# Add project root to path so health modules and config are importable
_ROOT = pathlib.Path(__file__).parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from pydantic import ValidationError  # noqa: E402

from config.settings import Settings, load_settings  # noqa: E402
from scripts.commands import CommandExecutor, SubprocessExecutor  # noqa: E402
from scripts.health import CheckResult  # noqa: E402
from scripts.health import dockerfiles as health_dockerfiles  # noqa: E402
from scripts.health import manifests as health_manifests  # noqa: E402
from scripts.health import stack as health_stack  # noqa: E402
from scripts.health import submodules as health_submodules  # noqa: E402

STAGE_LABELS = {
    health_submodules.STAGE: "Stage 1: Submodules",
    health_dockerfiles.STAGE: "Stage 2: Dockerfiles",
    health_manifests.STAGE_COMPOSE: "Stage 3: Compose Manifest",
    health_manifests.STAGE_CONFIG: "Stage 4: Environment & Packages",
    health_stack.STAGE: "Stage 5: Stack Build & Runtime",
}


def run_validation(
    cfg: Settings | None = None,
    executor: CommandExecutor | None = None,
    include_stack: bool = True,
    sleep: Callable[[float], None] | None = None,
) -> list[CheckResult]:
    """Run every stage and return a flat list of CheckResult objects."""
    if cfg is None:
        cfg = load_settings()
    if executor is None:
        executor = SubprocessExecutor()

    root = cfg.stack_root
    all_results: list[CheckResult] = []

    # Stage 1: Submodules
    presence = health_submodules.check_presence(root)
    all_results.extend(presence)
    initialized = [r.name for r in presence if r.passed]
    all_results.extend(health_submodules.check_freshness(cfg, executor, initialized))

    # Stage 2: Dockerfiles
    all_results.extend(health_dockerfiles.check_dockerfiles(root))

    # Stage 3: Compose
    all_results.extend(health_manifests.check_compose(cfg.compose_path))
    all_results.extend(health_manifests.check_compose_healthchecks(root, cfg.compose_path))

    # Stage 4: .env + package.json
    all_results.extend(health_manifests.check_env_file(cfg.env_file_path))
    all_results.extend(health_manifests.check_package_manifests(root))

    # Stage 5: build + runtime
    if include_stack:
        all_results.append(health_stack.check_build(cfg, executor))
        all_results.append(health_stack.check_runtime(cfg, executor, sleep=sleep))
    else:
        all_results.append(
            CheckResult(health_stack.STAGE, "Compose build / runtime", True, "skipped (--skip-stack)")
        )

    return all_results


def _print_results(results: list[CheckResult], cfg: Settings) -> bool:
    """Print formatted results. Returns True if all passed."""
    print()
    print("╔══════════════════════════════════════════════════════════╗")
    print("  CoachArtie: Deployment Validation")
    print(f"  ROOT={cfg.stack_root.resolve()}  COMPOSE={cfg.COMPOSE_FILE}")
    print("╚══════════════════════════════════════════════════════════╝")

    current_stage = None
    for r in results:
        if r.stage != current_stage:
            current_stage = r.stage
            label = STAGE_LABELS.get(r.stage, r.stage)
            print(f"\n━━━ {label} ━━━")
        print(r)

    passed = sum(1 for r in results if r.passed)
    total = len(results)
    all_passed = passed == total

    print()
    print("╔══════════════════════════════════════════════════════════╗")
    print(f"  Deployment Validation Complete: {passed}/{total} passed")
    if all_passed:
        print("  All checks passed ✓")
    else:
        failed = total - passed
        print(f"  FAILED: {failed} check(s) — see [FAIL] lines above")
    print("╚══════════════════════════════════════════════════════════╝")

    return all_passed


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate the CoachArtie deployment checkout.")
    parser.add_argument("--env-file", default=".env", help="Settings env file (default: .env)")
    parser.add_argument(
        "--skip-stack",
        action="store_true",
        help="Skip compose build and the up/ps/down runtime check",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        cfg = load_settings(args.env_file)
    except ValidationError as exc:
        print(f"ERROR: invalid configuration in {args.env_file}\n{exc}", file=sys.stderr)
        return 1

    results = run_validation(cfg, include_stack=not args.skip_stack)
    return 0 if _print_results(results, cfg) else 1


if __name__ == "__main__":
    sys.exit(main())
