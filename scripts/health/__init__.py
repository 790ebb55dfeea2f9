"""
scripts/health — Composable check modules for the CoachArtie stack.

Each module exposes check functions that return CheckResult objects.
smoke_test.py drives the live HTTP probes in services.py; validate.py
aggregates the deployment checks from the other modules.

Usage:
    from scripts.health import CheckResult
    from scripts.health.submodules import check_presence
"""

from dataclasses import dataclass


@dataclass
class CheckResult:
    stage: str
    name: str
    passed: bool
    message: str
    detail: str | None = None

    def __str__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        line = f"  [{status}] {self.name}: {self.message}"
        if self.detail and not self.passed:
            line += f"\n         {self.detail}"
        return line
