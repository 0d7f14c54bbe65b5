"""Factory construction and readiness gating.

Usage:
    from flagfactory.features.factory import FactoryBuilder, build, local

    # Remote mode: background sync, wait for the first snapshot
    factory = build("my-api-token")
    factory.block_until_ready(10)

    # Local mode: fixed treatments from ~/.split, ready immediately
    factory = build("localhost")
    factory = local("/path/to/dir")

    # Isolated builder for tests
    builder = FactoryBuilder(settings, lock=threading.Lock(), engine_factory=fake_engine)
"""

from __future__ import annotations

from .builder import FactoryBuilder, build, local
from .factory import Factory, LocalFactory, RemoteFactory
from .readiness import Cancellation, ReadinessGate, ReadinessState, validate_timeout
from .selector import LOCALHOST_TOKEN, FactoryMode, select_mode

__all__ = [
    "LOCALHOST_TOKEN",
    "Cancellation",
    "Factory",
    "FactoryBuilder",
    "FactoryMode",
    "LocalFactory",
    "ReadinessGate",
    "ReadinessState",
    "RemoteFactory",
    "build",
    "local",
    "select_mode",
    "validate_timeout",
]
