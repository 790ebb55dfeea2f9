"""
tests/conftest.py — Shared fixtures and path setup for all tests.

Adds the project root to sys.path so tests can import:
    from config.settings import Settings
    from scripts.health import CheckResult
    from scripts.validate import run_validation
"""
from __future__ import annotations

import json
import pathlib
import sys
from dataclasses import dataclass, field

import pytest

# Make project root importable without installing as a package
PROJECT_ROOT = pathlib.Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from scripts.commands import CommandError, CommandResult  # noqa: E402

GOOD_TS_DOCKERFILE = """\
FROM node:20-alpine
WORKDIR /app
COPY package*.json ./
RUN npm install
COPY . .
RUN npm run build
RUN npm prune --omit=dev
HEALTHCHECK CMD wget -qO- http://localhost:3000/health || exit 1
CMD ["node", "dist/index.js"]
"""

GOOD_COMPOSE = """\
services:
  capabilities:
    build:
      context: ./coachartie_capabilities
    healthcheck:
      test: ["CMD", "curl", "-f", "http://localhost:9991/health"]
  discord:
    build:
      context: ./coachartie_discord
    healthcheck:
      test: ["CMD", "true"]
  sms:
    build:
      context: ./coachartie_sms
  email:
    build:
      context: ./coachartie_email
"""

GOOD_ENV = """\
SUPABASE_URL=https://example.supabase.co
SUPABASE_API_KEY=secret
DISCORD_BOT_TOKEN=token
WEBHOOK_PASSPHRASE=passphrase
"""


@dataclass
class FakeExecutor:
    """Scripted CommandExecutor: responses keyed by the command's trailing args."""

    responses: dict[tuple[str, ...], str | Exception] = field(default_factory=dict)
    calls: list[tuple[list[str], str | None, float | None]] = field(default_factory=list)

    def on(self, *args: str, stdout: str = "", error: str | None = None) -> FakeExecutor:
        self.responses[args] = CommandError(list(args), error) if error else stdout
        return self

    def run(self, args, cwd=None, timeout=None):  # noqa: ANN001
        self.calls.append((list(args), str(cwd) if cwd is not None else None, timeout))
        for suffix, response in self.responses.items():
            if tuple(args[-len(suffix):]) == suffix:
                if isinstance(response, Exception):
                    raise response
                return CommandResult(list(args), 0, response, "")
        return CommandResult(list(args), 0, "", "")

    def commands(self) -> list[list[str]]:
        return [args for args, _, _ in self.calls]


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def checkout(tmp_path: pathlib.Path) -> pathlib.Path:
    """A deployable CoachArtie checkout: submodules, Dockerfiles, compose, .env."""
    for submodule in (
        "coachartie_capabilities",
        "coachartie_discord",
        "coachartie_sms",
        "coachartie_email",
    ):
        (tmp_path / submodule).mkdir()
        (tmp_path / submodule / ".git").write_text("gitdir: ../.git/modules/x\n", encoding="utf-8")

    (tmp_path / "coachartie_capabilities" / "dockerfile").write_text(
        "FROM node:20\nRUN npm ci\n", encoding="utf-8"
    )
    (tmp_path / "coachartie_discord" / "Dockerfile").write_text(
        "FROM node:20\nRUN npm ci\n", encoding="utf-8"
    )
    for submodule in ("coachartie_sms", "coachartie_email"):
        (tmp_path / submodule / "Dockerfile").write_text(GOOD_TS_DOCKERFILE, encoding="utf-8")
        (tmp_path / submodule / "package.json").write_text(
            json.dumps(
                {
                    "name": submodule,
                    "scripts": {"build": "tsc"},
                    "devDependencies": {"typescript": "^5.4.0"},
                }
            ),
            encoding="utf-8",
        )
    (tmp_path / "coachartie_capabilities" / "package.json").write_text(
        json.dumps({"name": "coachartie_capabilities"}), encoding="utf-8"
    )

    (tmp_path / "docker-compose.yml").write_text(GOOD_COMPOSE, encoding="utf-8")
    (tmp_path / ".env").write_text(GOOD_ENV, encoding="utf-8")
    return tmp_path
