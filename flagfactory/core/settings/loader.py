"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Usage:
    from flagfactory.core.settings.loader import get_factory_settings

    settings = get_factory_settings()  # First call: loads and validates
    settings = get_factory_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the cache to force reload:
    clear_all_caches()

    Or override with custom values:
    settings = FactorySettings(sdk_url="http://localhost:9000")
"""

from __future__ import annotations

from functools import lru_cache

from .client import FactorySettings
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_factory_settings() -> FactorySettings:
    """Get cached factory construction settings.

    Returns:
        Validated and frozen FactorySettings instance.
    """
    return FactorySettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


def clear_all_caches() -> None:
    """Clear all settings caches.

    Useful for testing or when you need to force reload settings.
    """
    get_factory_settings.cache_clear()
    get_logging_settings.cache_clear()
