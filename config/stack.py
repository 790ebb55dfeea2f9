"""
config/stack.py — Static description of the CoachArtie deployment.

These tables never change at runtime; anything environment-specific (URLs,
timeouts, file locations) lives in config/settings.py instead.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceDescriptor:
    """A live service the smoke test probes."""

    name: str
    base_url: str


@dataclass(frozen=True)
class DeployedService:
    """A service built from its own git submodule."""

    name: str
    submodule: str
    dockerfile: str
    typescript: bool = False
    has_package_json: bool = True

    @property
    def package_json(self) -> str:
        return f"{self.submodule}/package.json"


DEPLOYED_SERVICES: tuple[DeployedService, ...] = (
    # capabilities ships a lowercase "dockerfile"
    DeployedService("capabilities", "coachartie_capabilities", "coachartie_capabilities/dockerfile"),
    DeployedService(
        "discord",
        "coachartie_discord",
        "coachartie_discord/Dockerfile",
        has_package_json=False,
    ),
    DeployedService("sms", "coachartie_sms", "coachartie_sms/Dockerfile", typescript=True),
    DeployedService("email", "coachartie_email", "coachartie_email/Dockerfile", typescript=True),
)

REQUIRED_ENV_VARS: tuple[str, ...] = (
    "SUPABASE_URL",
    "SUPABASE_API_KEY",
    "DISCORD_BOT_TOKEN",
    "WEBHOOK_PASSPHRASE",
)

# TypeScript images must install dev dependencies, build, then prune.
TYPESCRIPT_DOCKERFILE_REQUIRED: tuple[str, ...] = (
    "npm install",
    "npm run build",
    "npm prune --omit=dev",
)
# Installing prod-only before `npm run build` leaves tsc missing at build time.
TYPESCRIPT_DOCKERFILE_FORBIDDEN: tuple[str, ...] = ("npm install --omit=dev",)
