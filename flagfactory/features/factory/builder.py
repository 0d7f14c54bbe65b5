"""Factory construction.

``FactoryBuilder`` is the entry point for obtaining a factory:

- ``build(token)`` routes on the token: ``"localhost"`` -> ``local()``,
  anything else -> ``build_remote()``.
- ``build_remote(token, settings)`` runs under a construction lock so that
  concurrent builds never initialize shared resources (metric series, HTTP
  clients, background threads) at the same time. It is not a cache: each call
  creates an independent factory and engine.
- ``local(home)`` reads the override file once and returns a factory that is
  already ready.

Builders created without an explicit lock share one process-wide lock. Tests
that need isolation pass their own ``threading.Lock``.

Example:
    builder = FactoryBuilder()
    factory = builder.build("my-api-token")
    factory.block_until_ready(10)
    treatment = factory.client().get_treatment("user-123", "new_dashboard")
"""

from __future__ import annotations

import logging
from pathlib import Path
import threading
import time
from typing import TYPE_CHECKING

from pydantic import ValidationError

from flagfactory.core.exceptions import (
    InvalidArgumentError,
    ReadinessInterruptedError,
    ReadinessTimeoutError,
)
from flagfactory.core.settings.client import FactorySettings
from flagfactory.features.evaluation.client import SnapshotClient
from flagfactory.features.localhost.client import LocalhostClient
from flagfactory.features.localhost.overrides import load_overrides, resolve_override_path
from flagfactory.features.sync.engine import create_http_engine
from flagfactory.features.sync.storage import SnapshotStore
from flagfactory.infra.metrics.tracking import track_factory_built

from .factory import LocalFactory, RemoteFactory
from .readiness import ReadinessGate
from .selector import FactoryMode, select_mode

if TYPE_CHECKING:
    from collections.abc import Callable

    from flagfactory.features.sync.engine import Engine

    from .factory import Factory

    EngineFactory = Callable[[str, FactorySettings, SnapshotStore, ReadinessGate], Engine]

logger = logging.getLogger(__name__)

# Shared by every builder that is not given its own lock
_PROCESS_BUILD_LOCK = threading.Lock()


class FactoryBuilder:
    """Builds local and remote factories.

    Args:
        settings: Settings used when a call does not pass its own. Loaded
            from the environment on first use when omitted.
        lock: Construction lock. Defaults to the process-wide lock. Must not
            be held by the caller of ``build_remote`` (it is not reentrant).
        engine_factory: Creates the synchronization engine for a remote
            factory. Defaults to the HTTP polling engine.
    """

    def __init__(
        self,
        settings: FactorySettings | None = None,
        *,
        lock: threading.Lock | None = None,
        engine_factory: EngineFactory | None = None,
    ) -> None:
        self._settings = settings
        self._lock = lock if lock is not None else _PROCESS_BUILD_LOCK
        self._engine_factory = engine_factory or create_http_engine

    @property
    def lock(self) -> threading.Lock:
        return self._lock

    def build(self, token: str, settings: FactorySettings | None = None) -> Factory:
        """Build a factory for ``token``.

        If the effective settings set ``block_until_ready``, waits for
        readiness after construction (outside the construction lock). A
        factory that fails that wait is destroyed before the error propagates.

        Raises:
            InvalidArgumentError: ``token`` is None, or the settings loaded from
                the environment are invalid.
            OverrideSourceError: Local mode and the override file is unusable.
            ReadinessTimeoutError: ``block_until_ready`` elapsed first.
            ReadinessInterruptedError: The readiness wait was interrupted.
        """
        mode = select_mode(token)
        resolved = settings if settings is not None else self._default_settings()

        if mode is FactoryMode.LOCAL:
            return self._build_local(resolved.localhost_home)

        factory = self.build_remote(token, resolved)
        if resolved.block_until_ready is not None:
            try:
                factory.block_until_ready(resolved.block_until_ready)
            except (ReadinessTimeoutError, ReadinessInterruptedError):
                factory.destroy(timeout=0)
                raise
        return factory

    def build_remote(self, token: str, settings: FactorySettings) -> RemoteFactory:
        """Construct a remote factory under the construction lock.

        The returned factory starts NOT_READY; use ``block_until_ready`` to
        wait for its first snapshot.

        Raises:
            InvalidArgumentError: ``token`` or ``settings`` is missing.
        """
        if token is None:
            raise InvalidArgumentError("API token must not be None", argument="token")
        if not isinstance(token, str):
            raise InvalidArgumentError(
                f"API token must be a string, got {type(token).__name__}",
                argument="token",
            )
        if settings is None:
            raise InvalidArgumentError("settings must not be None", argument="settings")
        if not isinstance(settings, FactorySettings):
            raise InvalidArgumentError(
                f"settings must be FactorySettings, got {type(settings).__name__}",
                argument="settings",
            )

        with self._lock:
            started = time.monotonic()
            gate = ReadinessGate()
            store = SnapshotStore()
            engine = self._engine_factory(token, settings, store, gate)
            factory = RemoteFactory(
                token=token,
                settings=settings,
                gate=gate,
                store=store,
                engine=engine,
                client=SnapshotClient(store),
            )
            try:
                engine.start()
            except Exception:
                engine.stop(timeout=0)
                raise
            track_factory_built(FactoryMode.REMOTE, time.monotonic() - started)

        logger.info("Built remote factory", extra={"sdk_url": settings.sdk_url})
        return factory

    def local(self, home: str | Path | None = None) -> LocalFactory:
        """Build a factory from local overrides.

        Args:
            home: Directory holding ``.split``, or the override file itself.
                Defaults to ``settings.localhost_home``, then the user's home.

        Raises:
            InvalidArgumentError: ``home`` is an empty string.
            OverrideSourceError: The override file cannot be read or parsed.
        """
        if home is not None and not str(home).strip():
            raise InvalidArgumentError("home must not be empty", argument="home")
        if home is None:
            home = self._default_settings().localhost_home
        return self._build_local(home)

    def _build_local(self, home: str | Path | None) -> LocalFactory:
        path = resolve_override_path(home)
        overrides = load_overrides(path)
        factory = LocalFactory(LocalhostClient(overrides), source=str(path))
        track_factory_built(FactoryMode.LOCAL)
        return factory

    def _default_settings(self) -> FactorySettings:
        if self._settings is not None:
            return self._settings
        from flagfactory.core.settings import get_factory_settings

        try:
            return get_factory_settings()
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'settings'}: {error['msg']}"
                for error in exc.errors()
            )
            raise InvalidArgumentError(
                f"Invalid factory settings: {problems}",
                argument="settings",
            ) from exc


_default_builder = FactoryBuilder()


def build(token: str, settings: FactorySettings | None = None) -> Factory:
    """Build a factory with the process-wide default builder."""
    return _default_builder.build(token, settings)


def local(home: str | Path | None = None) -> LocalFactory:
    """Build a local override factory with the process-wide default builder."""
    return _default_builder.local(home)
