"""flagfactory - feature flag client factories with readiness gating.

Usage:
    import flagfactory

    factory = flagfactory.build("my-api-token")
    factory.block_until_ready(10)
    client = factory.client()
    if client.get_treatment("user-123", "new_dashboard") == "on":
        ...
"""

from __future__ import annotations

from flagfactory.core.exceptions import (
    FlagFactoryError,
    InvalidArgumentError,
    OverrideSourceError,
    ReadinessInterruptedError,
    ReadinessTimeoutError,
)
from flagfactory.core.settings import FactorySettings
from flagfactory.features.evaluation import Treatments
from flagfactory.features.factory import (
    LOCALHOST_TOKEN,
    Cancellation,
    Factory,
    FactoryBuilder,
    ReadinessState,
    build,
    local,
)

__version__ = "0.1.0"

__all__ = [
    "LOCALHOST_TOKEN",
    "Cancellation",
    "Factory",
    "FactoryBuilder",
    "FactorySettings",
    "FlagFactoryError",
    "InvalidArgumentError",
    "OverrideSourceError",
    "ReadinessInterruptedError",
    "ReadinessState",
    "ReadinessTimeoutError",
    "Treatments",
    "build",
    "local",
]
