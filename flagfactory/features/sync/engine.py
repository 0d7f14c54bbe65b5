"""Background synchronization engine.

One engine runs per remote factory on its own daemon thread:

    fetch snapshot (with retry) -> store -> signal readiness on first success
    wait features_refresh_rate -> fetch again ... until stop()

Fetch failures are logged and counted; they never end the thread, so a
factory that missed its caller's readiness deadline can still become ready.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol

import httpx

from flagfactory.core.exceptions import SnapshotFetchError
from flagfactory.infra.metrics.tracking import track_sync_fetch
from flagfactory.utils.retry import RetryError, RetryStrategy, retry

from .fetcher import HttpSnapshotFetcher, is_transient

if TYPE_CHECKING:
    from flagfactory.core.settings.client import FactorySettings
    from flagfactory.features.evaluation.schemas import Snapshot
    from flagfactory.features.factory.readiness import ReadinessGate

    from .fetcher import SnapshotFetcher
    from .storage import SnapshotStore

logger = logging.getLogger(__name__)


class Engine(Protocol):
    """Lifecycle contract the factory relies on."""

    def start(self) -> None: ...

    def stop(self, timeout: float | None = None) -> None: ...


class SynchronizationEngine:
    """Keeps a SnapshotStore fresh and opens a ReadinessGate once."""

    def __init__(
        self,
        fetcher: SnapshotFetcher,
        store: SnapshotStore,
        gate: ReadinessGate,
        settings: FactorySettings,
        *,
        name: str = "flagfactory-sync",
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._gate = gate
        self._refresh_rate = settings.features_refresh_rate
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._name = name
        self._lock = threading.Lock()

        strategy = RetryStrategy(
            max_attempts=settings.fetch_max_attempts,
            initial_delay=settings.fetch_initial_delay,
            exceptions=(httpx.TransportError, SnapshotFetchError),
            retry_if=is_transient,
        )
        self._fetch = retry(strategy, stop_event=self._stop_event)(self._fetch_snapshot)

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start the background thread. Starting twice, or after stop(), is an error."""
        with self._lock:
            if self._thread is not None:
                raise RuntimeError("synchronization engine already started")
            if self._stop_event.is_set():
                raise RuntimeError("synchronization engine already stopped")
            thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            thread.start()
            self._thread = thread
        logger.debug("Started synchronization thread %s", self._name)

    def stop(self, timeout: float | None = None) -> None:
        """Signal the thread to stop and wait up to ``timeout`` for it.

        A fetch already in flight is not aborted; the thread closes the
        fetcher itself once it returns. An engine that was never started
        closes its fetcher here.
        """
        self._stop_event.set()
        with self._lock:
            thread = self._thread
        if thread is None:
            self._fetcher.close()
        elif thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.debug("Synchronization thread %s still finishing a fetch", self._name)
        logger.debug("Stopped synchronization thread %s", self._name)

    def refresh_once(self) -> bool:
        """Run one fetch cycle.

        Returns:
            True if a new snapshot was stored.
        """
        try:
            snapshot = self._fetch()
        except (RetryError, SnapshotFetchError, httpx.HTTPError) as exc:
            track_sync_fetch("failure")
            logger.warning(
                "Snapshot fetch failed: %s",
                exc,
                extra={"engine": self._name, "ready": self._gate.is_ready()},
            )
            return False

        if self._stop_event.is_set():
            return False

        version = self._store.put(snapshot)
        track_sync_fetch("success", len(snapshot.flags))
        if not self._gate.is_ready():
            logger.info("First snapshot loaded, factory is ready", extra={"engine": self._name})
        self._gate.set_ready()
        logger.debug("Stored snapshot version %d", version)
        return True

    def _fetch_snapshot(self) -> Snapshot:
        return self._fetcher.fetch()

    def _run(self) -> None:
        try:
            while not self._stop_event.is_set():
                try:
                    self.refresh_once()
                except Exception:
                    logger.exception("Unexpected error in synchronization loop")
                if self._stop_event.wait(self._refresh_rate):
                    break
        finally:
            self._fetcher.close()


def create_http_engine(
    token: str,
    settings: FactorySettings,
    store: SnapshotStore,
    gate: ReadinessGate,
) -> SynchronizationEngine:
    """Default engine factory used by FactoryBuilder."""
    fetcher = HttpSnapshotFetcher(token, settings)
    return SynchronizationEngine(fetcher, store, gate, settings)
