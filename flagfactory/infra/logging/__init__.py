"""Logging infrastructure.

Basic usage:
    import logging

    from flagfactory.infra.logging import setup_logging

    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Factory ready", extra={"mode": "remote"})
"""

from flagfactory.infra.logging.config import configure_logging, setup_logging
from flagfactory.infra.logging.formatters import JSONFormatter

__all__ = [
    "JSONFormatter",
    "configure_logging",
    "setup_logging",
]
