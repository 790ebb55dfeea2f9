#!/usr/bin/env python3
"""
scripts/smoke_test.py — End-to-end smoke test for the running CoachArtie stack.

Pings every service's /health endpoint, then exercises the capabilities
service (list, execute, chat). Probes run one after another so the console
output reads top to bottom.

Exit codes:
  0    all checks passed
  1    one or more checks failed, or the runner itself crashed
  130  interrupted (Ctrl-C)

Usage:
    python3 scripts/smoke_test.py                 # reads .env from cwd
    python3 scripts/smoke_test.py --env-file env/ci.env

Importable (used by unit tests):
    from scripts.smoke_test import ProbeRunner
    summary = asyncio.run(ProbeRunner(cfg.services, cfg.CAPABILITIES_URL).run_all())
"""

from __future__ import annotations

import argparse
import asyncio
import pathlib
import sys
from collections.abc import Sequence
from dataclasses import dataclass

_ROOT = pathlib.Path(__file__).parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import httpx  # noqa: E402
from pydantic import ValidationError  # noqa: E402

from config.settings import load_settings  # noqa: E402
from config.stack import ServiceDescriptor  # noqa: E402
from scripts.console import log  # noqa: E402
from scripts.health import CheckResult  # noqa: E402
from scripts.health import services as probes  # noqa: E402

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130


@dataclass
class RunSummary:
    passed: int = 0
    total: int = 0

    def record(self, result: CheckResult) -> None:
        self.total += 1
        if result.passed:
            self.passed += 1

    @property
    def all_passed(self) -> bool:
        return self.passed == self.total

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.all_passed else EXIT_FAILED


class ProbeRunner:
    """Runs the fixed probe battery against an immutable list of services."""

    def __init__(
        self,
        services: Sequence[ServiceDescriptor],
        capabilities_url: str,
        *,
        timeout: float = probes.DEFAULT_TIMEOUT_SECONDS,
        chat_token: str = "test",
        chat_user_id: str = "test-e2e-user",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.services = tuple(services)
        self.capabilities_url = capabilities_url
        self.timeout = timeout
        self.chat_token = chat_token
        self.chat_user_id = chat_user_id
        self._client = client

    async def run_all(self) -> RunSummary:
        if self._client is not None:
            return await self._run(self._client)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._run(client)

    async def _run(self, client: httpx.AsyncClient) -> RunSummary:
        summary = RunSummary()
        log("blue", "🧪", "Starting CoachArtie E2E Integration Tests...\n")

        log("yellow", "📊", "Testing service health checks...")
        for service in self.services:
            summary.record(await probes.check_health(client, service, self.timeout))

        print()
        log("yellow", "⚙️", "Testing core functionality...")
        summary.record(await probes.check_capability_listing(client, self.capabilities_url))
        summary.record(await probes.check_capability_execution(client, self.capabilities_url))
        summary.record(
            await probes.check_chat_endpoint(
                client,
                self.capabilities_url,
                token=self.chat_token,
                user_id=self.chat_user_id,
            )
        )

        print()
        if summary.all_passed:
            log("green", "🎉", f"All tests passed! ({summary.passed}/{summary.total})")
        else:
            log("red", "💥", f"Some tests failed: {summary.passed}/{summary.total} passed")
        return summary


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Smoke test the running CoachArtie stack.")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Env file with service URLs and timeouts (default: .env)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        return _run_smoke_test(args.env_file)
    except KeyboardInterrupt:
        log("yellow", "⚡", "Tests interrupted")
        return EXIT_INTERRUPTED


def _run_smoke_test(env_file: str) -> int:
    try:
        cfg = load_settings(env_file)
    except ValidationError as exc:
        log("red", "💥", f"Invalid configuration in {env_file}:\n{exc}")
        return EXIT_FAILED

    runner = ProbeRunner(
        cfg.services,
        cfg.CAPABILITIES_URL,
        timeout=cfg.HEALTH_HTTP_TIMEOUT_SECONDS,
        chat_token=cfg.CHAT_BEARER_TOKEN,
        chat_user_id=cfg.CHAT_USER_ID,
    )
    try:
        summary = asyncio.run(runner.run_all())
    except Exception as exc:  # noqa: BLE001
        log("red", "💥", f"Test runner failed: {exc}")
        return EXIT_FAILED
    return summary.exit_code


if __name__ == "__main__":
    sys.exit(main())
