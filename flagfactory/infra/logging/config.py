"""Logging configuration setup.

Provides logging configuration using:
- dictConfig for flexible configuration
- All handlers on root logger (child loggers propagate)
- Console output on stderr, keeping stdout free for evaluation results
- JSONL format for machine parsing, text format for humans
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

if TYPE_CHECKING:
    from flagfactory.core.settings.logs import LoggingSettings

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from flagfactory.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = settings_obj.to_logging_kwargs()
    if configure_kwargs:
        log_config = {**log_config, **configure_kwargs}

    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "WARNING",
    json_logs: bool = False,
    service_name: str = "flagfactory",
    include_thread_info: bool = False,
    **kwargs: Any,
) -> None:
    """Configure logging with dictConfig.

    A single stderr handler sits on the root logger; every package logger
    propagates to it. Python ``warnings`` are routed through logging as well.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Enable JSONL (JSON Lines) structured logging.
        service_name: Static service field added to JSON records.
        include_thread_info: Include thread ID and name in records.
        **kwargs: Unused settings, logged at DEBUG.

    Example:
        from flagfactory.core.settings import get_logging_settings
        log_settings = get_logging_settings()
        configure_logging(**log_settings.to_logging_kwargs())
    """
    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs.keys())))

    logging.captureWarnings(True)

    formatter_name = "json" if json_logs else "text"
    logging_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": _build_formatters_config(
            json_logs=json_logs,
            service_name=service_name,
            include_thread_info=include_thread_info,
        ),
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": formatter_name,
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "level": log_level.upper(),
            "handlers": ["stderr"],
        },
        "loggers": {
            # httpx logs every request at INFO
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    }

    logging.config.dictConfig(logging_config)


def _build_formatters_config(
    json_logs: bool,
    service_name: str,
    include_thread_info: bool,
) -> dict[str, Any]:
    """Build formatters configuration for dictConfig."""
    if json_logs:
        return {
            "json": {
                "()": "flagfactory.infra.logging.formatters.JSONFormatter",
                "static": {"service": service_name},
                "include_thread_info": include_thread_info,
            }
        }

    fmt = TEXT_FORMAT
    if include_thread_info:
        fmt = "%(asctime)s - %(levelname)s - %(name)s - [%(threadName)s] - %(message)s"
    return {"text": {"format": fmt, "datefmt": DATE_FORMAT}}
