"""
config/settings.py — Canonical configuration contract for the stack checks.

Uses pydantic-settings to load, validate, and type-check every knob the smoke
test runner and the deployment validator read: service URLs, HTTP and command
timeouts, compose invocation, and submodule tracking.

Two usage modes:
  Scripts:
      cfg = load_settings()              # reads from .env + os.environ
      cfg = load_settings("env/ci.env")  # override env file path

  Tests (isolated — no env file, no os.environ bleed):
      cfg = Settings(CAPABILITIES_URL="http://capabilities:9991", ...)
"""
from __future__ import annotations

import os
import re
import shlex
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from config.stack import ServiceDescriptor

MAX_WARMUP_SECONDS = 600


class Settings(BaseSettings):
    # Settings() reads purely from kwargs. load_settings() is the explicit
    # entry point that merges the env file and os.environ.
    model_config = SettingsConfigDict(
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings,)

    # -------------------------------------------------------------------------
    # Live service endpoints
    # -------------------------------------------------------------------------
    CAPABILITIES_URL: str = "http://localhost:9991"
    BRAIN_URL: str = "http://localhost:9992"
    SMS_URL: str = "http://localhost:9993"
    EMAIL_URL: str = "http://localhost:9994"
    HEALTH_HTTP_TIMEOUT_SECONDS: float = 5.0

    # -------------------------------------------------------------------------
    # Chat probe
    # -------------------------------------------------------------------------
    CHAT_BEARER_TOKEN: str = "test"
    CHAT_USER_ID: str = "test-e2e-user"

    # -------------------------------------------------------------------------
    # Checkout layout
    # -------------------------------------------------------------------------
    STACK_ROOT: str = "."
    COMPOSE_COMMAND: str = "docker-compose"
    COMPOSE_FILE: str = "docker-compose.yml"
    STACK_ENV_FILE: str = ".env"

    # -------------------------------------------------------------------------
    # Submodule tracking (single branch for every submodule)
    # -------------------------------------------------------------------------
    SUBMODULE_REMOTE: str = "origin"
    SUBMODULE_BRANCH: str = "main"

    # -------------------------------------------------------------------------
    # Command timeouts
    # -------------------------------------------------------------------------
    GIT_TIMEOUT_SECONDS: int = 60
    BUILD_TIMEOUT_SECONDS: int = 300
    STACK_UP_TIMEOUT_SECONDS: int = 60
    STACK_WARMUP_SECONDS: float = 30.0
    STACK_PS_TIMEOUT_SECONDS: int = 10
    STACK_DOWN_TIMEOUT_SECONDS: int = 30

    # -------------------------------------------------------------------------
    # Convenience properties
    # -------------------------------------------------------------------------

    @property
    def services(self) -> tuple[ServiceDescriptor, ...]:
        """Probe targets in the order the smoke test visits them."""
        return (
            ServiceDescriptor("capabilities", self.CAPABILITIES_URL),
            ServiceDescriptor("brain", self.BRAIN_URL),
            ServiceDescriptor("sms", self.SMS_URL),
            ServiceDescriptor("email", self.EMAIL_URL),
        )

    @property
    def stack_root(self) -> Path:
        return Path(self.STACK_ROOT)

    @property
    def compose_path(self) -> Path:
        return self.stack_root / self.COMPOSE_FILE

    @property
    def env_file_path(self) -> Path:
        return self.stack_root / self.STACK_ENV_FILE

    @property
    def remote_ref(self) -> str:
        return f"{self.SUBMODULE_REMOTE}/{self.SUBMODULE_BRANCH}"

    @property
    def runtime_check_bound_seconds(self) -> float:
        """Worst-case wall time of the up → warm-up → ps → down runtime check."""
        return (
            self.STACK_UP_TIMEOUT_SECONDS
            + self.STACK_WARMUP_SECONDS
            + self.STACK_PS_TIMEOUT_SECONDS
            + self.STACK_DOWN_TIMEOUT_SECONDS
        )

    @property
    def compose_args(self) -> list[str]:
        """Compose invocation prefix, e.g. ['docker', 'compose', '-f', 'docker-compose.yml']."""
        return shlex.split(self.COMPOSE_COMMAND) + ["-f", self.COMPOSE_FILE]

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------

    @field_validator("CAPABILITIES_URL", "BRAIN_URL", "SMS_URL", "EMAIL_URL", mode="before")
    @classmethod
    def normalise_url(cls, v: str) -> str:
        """Strip whitespace and trailing slashes so paths join cleanly."""
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"service URL must start with http:// or https://, got '{v}'")
        return v

    @field_validator(
        "COMPOSE_COMMAND",
        "SUBMODULE_REMOTE",
        "SUBMODULE_BRANCH",
        mode="before",
    )
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must be a non-empty string")
        return v

    @field_validator(
        "HEALTH_HTTP_TIMEOUT_SECONDS",
        "GIT_TIMEOUT_SECONDS",
        "BUILD_TIMEOUT_SECONDS",
        "STACK_UP_TIMEOUT_SECONDS",
        "STACK_PS_TIMEOUT_SECONDS",
        "STACK_DOWN_TIMEOUT_SECONDS",
    )
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @model_validator(mode="after")
    def validate_warmup(self) -> Settings:
        if self.STACK_WARMUP_SECONDS < 0:
            raise ValueError("STACK_WARMUP_SECONDS must be >= 0")
        if self.STACK_WARMUP_SECONDS >= MAX_WARMUP_SECONDS:
            raise ValueError(
                f"STACK_WARMUP_SECONDS must be less than {MAX_WARMUP_SECONDS}s; "
                "containers that need longer than that should report health themselves"
            )
        return self


def load_settings(env_file: str = ".env") -> Settings:
    """Load and validate settings from an env file + os.environ.

    The env file is parsed by hand and merged with os.environ (os.environ
    wins); only known Settings fields are passed through as kwargs. Secrets
    such as SUPABASE_API_KEY that share the file are ignored here.

    Raises:
        ValidationError: if a value is malformed or out of range.
    """
    file_vals: dict[str, str] = {}
    try:
        # Undecodable bytes are left for the .env check to report.
        with open(env_file, encoding="utf-8", errors="replace") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                k, _, v = line.partition("=")
                k = k.strip()
                # Strip inline comments: "main   # tracked branch" → "main"
                v = re.sub(r"\s+#.*$", "", v.strip())
                if k:
                    file_vals[k] = v
    except FileNotFoundError:
        pass
    merged = {**file_vals, **os.environ}
    known = {k: v for k, v in merged.items() if k in Settings.model_fields}
    return Settings(**known)
