"""Diagnostic logging settings.

Environment variables use LOG_ prefix.
Example: LOG_LEVEL=INFO, LOG_JSON_LOGS=true

Diagnostics always go to stderr: stdout belongs to the evaluation loop, so
there is no switch for the console handler and no file output.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_logging_yaml_source

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """How much the package says on stderr, and in which format."""

    level: LogLevel = Field(
        default="WARNING",
        description="Root logger level; WARNING keeps the interactive loop quiet",
    )

    json_logs: bool = Field(
        default=False,
        description="Emit one JSON object per line instead of text",
    )

    service_name: str = Field(
        default="flagfactory",
        description="Static 'service' field on JSON records",
    )

    include_thread_info: bool = Field(
        default=False,
        description="Tag records with the thread name, useful to tell sync threads apart",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.upper()
        return v

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Return kwargs for configure_logging(...)."""
        return {
            "log_level": self.level,
            "json_logs": self.json_logs,
            "service_name": self.service_name,
            "include_thread_info": self.include_thread_info,
        }

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
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
            create_logging_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
