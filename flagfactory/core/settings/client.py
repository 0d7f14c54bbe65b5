"""Factory construction settings.

Environment variables use FLAGS_ prefix.
Example: FLAGS_SDK_URL=https://flags.internal/api, FLAGS_BLOCK_UNTIL_READY=10

A FactorySettings instance is consumed once at build time and then handed by
reference to the constructed factory. It is frozen, so nothing downstream can
mutate it.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_flags_yaml_source


class FactorySettings(BaseSettings):
    """Options controlling remote and local factory construction."""

    # ──────────────────────────────────────────────────────────────
    # Remote service
    # ──────────────────────────────────────────────────────────────

    sdk_url: str = Field(
        default="https://sdk.flagfactory.io/api",
        description="Base URL of the flag snapshot service",
    )

    connect_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120.0,
        description="HTTP connection timeout in seconds",
    )

    read_timeout: float = Field(
        default=60.0,
        gt=0,
        le=600.0,
        description="HTTP read timeout in seconds",
    )

    # ──────────────────────────────────────────────────────────────
    # Synchronization
    # ──────────────────────────────────────────────────────────────

    features_refresh_rate: float = Field(
        default=60.0,
        gt=0,
        description="Seconds between snapshot refreshes after the first one",
    )

    fetch_max_attempts: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Attempts per snapshot fetch before the cycle is given up",
    )

    fetch_initial_delay: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Initial backoff delay in seconds between fetch attempts",
    )

    # ──────────────────────────────────────────────────────────────
    # Readiness
    # ──────────────────────────────────────────────────────────────

    block_until_ready: float | None = Field(
        default=None,
        gt=0,
        description="If set, build() waits this many seconds for readiness before returning",
    )

    # ──────────────────────────────────────────────────────────────
    # Local override mode
    # ──────────────────────────────────────────────────────────────

    localhost_home: Path | None = Field(
        default=None,
        description="Directory or file holding local overrides. Defaults to the user's home directory.",
    )

    @field_validator("sdk_url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        """Require an http(s) URL and strip the trailing slash."""
        if not value.startswith(("http://", "https://")):
            raise ValueError("sdk_url must start with http:// or https://")
        return value.rstrip("/")

    model_config = SettingsConfigDict(
        env_prefix="FLAGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_flags_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
