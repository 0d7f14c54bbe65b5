"""Factory handles returned by FactoryBuilder."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from flagfactory.infra.metrics.tracking import track_factory_destroyed

from .readiness import ReadinessGate, ReadinessState, validate_timeout

if TYPE_CHECKING:
    from collections.abc import Mapping

    from flagfactory.core.settings.client import FactorySettings
    from flagfactory.features.evaluation.client import FlagClient, SnapshotClient
    from flagfactory.features.localhost.client import LocalhostClient
    from flagfactory.features.sync.engine import Engine
    from flagfactory.features.sync.storage import SnapshotStore

    from .readiness import Cancellation

logger = logging.getLogger(__name__)

# Seconds destroy() waits for the sync thread; an in-flight fetch finishes on its own
DESTROY_JOIN_TIMEOUT = 1.0


@runtime_checkable
class Factory(Protocol):
    """What callers get back from ``build`` and ``local``."""

    mode: str

    def client(self) -> FlagClient: ...

    def is_ready(self) -> bool: ...

    @property
    def readiness(self) -> ReadinessState: ...

    def block_until_ready(
        self,
        timeout: float,
        cancellation: Cancellation | None = None,
    ) -> ReadinessState: ...

    def destroy(self) -> None: ...


class RemoteFactory:
    """Factory backed by a background synchronization engine.

    Owns its gate, store and engine; nothing is shared with other factories
    built from the same token.
    """

    mode = "remote"

    def __init__(
        self,
        token: str,
        settings: FactorySettings,
        gate: ReadinessGate,
        store: SnapshotStore,
        engine: Engine,
        client: SnapshotClient,
    ) -> None:
        self._token = token
        self.settings = settings
        self._gate = gate
        self._store = store
        self._engine = engine
        self._client = client
        self._destroy_lock = threading.Lock()
        self._destroyed = False

    def __repr__(self) -> str:
        return f"RemoteFactory(token='...{self._token[-4:]}', readiness={self._gate.state.value})"

    def client(self) -> SnapshotClient:
        return self._client

    def is_ready(self) -> bool:
        return self._gate.is_ready()

    @property
    def readiness(self) -> ReadinessState:
        return self._gate.state

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def block_until_ready(
        self,
        timeout: float,
        cancellation: Cancellation | None = None,
    ) -> ReadinessState:
        """Wait for the first complete snapshot.

        Raises:
            InvalidArgumentError: Timeout is not a positive number.
            ReadinessTimeoutError: Not ready before the deadline.
            ReadinessInterruptedError: ``cancellation`` fired while waiting.
        """
        return self._gate.await_ready(timeout, cancellation=cancellation)

    def destroy(self, timeout: float = DESTROY_JOIN_TIMEOUT) -> None:
        """Stop background synchronization. Safe to call more than once.

        Args:
            timeout: Seconds to wait for the sync thread to exit. The thread
                is a daemon and releases its HTTP client when it finishes.
        """
        with self._destroy_lock:
            if self._destroyed:
                return
            self._destroyed = True
        self._client.destroy()
        self._engine.stop(timeout=timeout)
        track_factory_destroyed(self.mode)
        logger.info("Destroyed remote factory")


class LocalFactory:
    """Factory serving fixed treatments from local overrides. Always ready."""

    mode = "local"

    def __init__(self, client: LocalhostClient, source: str | None = None) -> None:
        self._client = client
        self.source = source
        self._gate = ReadinessGate.ready()
        self._destroy_lock = threading.Lock()
        self._destroyed = False

    def __repr__(self) -> str:
        return f"LocalFactory(source={self.source!r}, overrides={len(self._client.overrides)})"

    @property
    def overrides(self) -> Mapping[str, str]:
        return self._client.overrides

    def client(self) -> LocalhostClient:
        return self._client

    def is_ready(self) -> bool:
        return True

    @property
    def readiness(self) -> ReadinessState:
        return self._gate.state

    def block_until_ready(
        self,
        timeout: float,
        cancellation: Cancellation | None = None,
    ) -> ReadinessState:
        """Return READY at once; the timeout is still validated."""
        validate_timeout(timeout)
        return ReadinessState.READY

    def destroy(self) -> None:
        with self._destroy_lock:
            if self._destroyed:
                return
            self._destroyed = True
        self._client.destroy()
        track_factory_destroyed(self.mode)
