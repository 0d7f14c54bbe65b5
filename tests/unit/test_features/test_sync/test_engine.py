"""Tests for the HTTP snapshot fetcher and the synchronization engine."""

from __future__ import annotations

import threading
import time

import httpx
import pytest

from flagfactory.core.exceptions import SnapshotFetchError
from flagfactory.features.factory.readiness import ReadinessGate, ReadinessState
from flagfactory.features.sync import HttpSnapshotFetcher, SnapshotStore, SynchronizationEngine
from flagfactory.features.sync.fetcher import is_transient
from flagfactory.infra.metrics.prometheus import REGISTRY

FLAGS_BODY = {
    "flags": [
        {
            "name": "new_dashboard",
            "keys": {"alice": "on"},
            "segment_rules": [{"segment": "beta", "treatment": "on"}],
        },
        {"name": "checkout_v2", "default_treatment": "on"},
    ]
}
BETA_BODY = {"name": "beta", "keys": ["bob"]}


def _handler(requests: list[httpx.Request] | None = None, flags_status: int = 200):
    def handle(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if request.url.path == "/api/flags":
            return httpx.Response(flags_status, json=FLAGS_BODY)
        if request.url.path == "/api/segments/beta":
            return httpx.Response(200, json=BETA_BODY)
        return httpx.Response(404)

    return handle


def _fetches(outcome: str) -> float:
    return REGISTRY.get_sample_value("flagfactory_sync_fetches_total", {"outcome": outcome}) or 0.0


class FlakyFetcher:
    """Fetcher failing a fixed number of times before succeeding."""

    def __init__(self, snapshot, failures: int = 0, error: Exception | None = None) -> None:
        self.snapshot = snapshot
        self.failures = failures
        self.error = error or SnapshotFetchError("unavailable", status_code=503)
        self.calls = 0
        self.closed = False

    def fetch(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.snapshot

    def close(self) -> None:
        self.closed = True


@pytest.mark.unit
class TestHttpSnapshotFetcher:
    """Tests for HttpSnapshotFetcher."""

    def test_fetches_flags_then_segments(self, settings):
        requests: list[httpx.Request] = []
        fetcher = HttpSnapshotFetcher("secret", settings, transport=httpx.MockTransport(_handler(requests)))

        snapshot = fetcher.fetch()
        fetcher.close()

        assert [r.url.path for r in requests] == ["/api/flags", "/api/segments/beta"]
        assert requests[0].headers["Authorization"] == "Bearer secret"
        assert set(snapshot.flags) == {"new_dashboard", "checkout_v2"}
        assert snapshot.segments["beta"] == frozenset({"bob"})

    def test_error_status_raises_with_code(self, settings):
        fetcher = HttpSnapshotFetcher(
            "secret",
            settings,
            transport=httpx.MockTransport(_handler(flags_status=401)),
        )

        with pytest.raises(SnapshotFetchError) as exc_info:
            fetcher.fetch()

        assert exc_info.value.status_code == 401
        assert exc_info.value.url.endswith("/api/flags")

    def test_malformed_body_raises(self, settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"flags": [{"name": ""}]}))
        fetcher = HttpSnapshotFetcher("secret", settings, transport=transport)

        with pytest.raises(SnapshotFetchError, match="Malformed response"):
            fetcher.fetch()

    def test_invalid_json_raises(self, settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"not json"))
        fetcher = HttpSnapshotFetcher("secret", settings, transport=transport)

        with pytest.raises(SnapshotFetchError, match="invalid JSON"):
            fetcher.fetch()

    def test_inconsistent_segment_name_raises(self, settings):
        def handle(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/flags":
                return httpx.Response(200, json=FLAGS_BODY)
            return httpx.Response(200, json={"name": "other", "keys": []})

        fetcher = HttpSnapshotFetcher("secret", settings, transport=httpx.MockTransport(handle))

        with pytest.raises(SnapshotFetchError, match="Inconsistent snapshot"):
            fetcher.fetch()


@pytest.mark.unit
class TestIsTransient:
    """Tests for the retry predicate."""

    @pytest.mark.parametrize("status", [500, 502, 503, 429])
    def test_server_errors_are_transient(self, status):
        assert is_transient(SnapshotFetchError("x", status_code=status)) is True

    @pytest.mark.parametrize("status", [400, 401, 403, 404])
    def test_client_errors_are_not_transient(self, status):
        assert is_transient(SnapshotFetchError("x", status_code=status)) is False

    def test_malformed_body_is_not_transient(self):
        assert is_transient(SnapshotFetchError("x")) is False

    def test_transport_errors_are_transient(self):
        assert is_transient(httpx.ConnectError("refused")) is True


@pytest.mark.unit
class TestSynchronizationEngine:
    """Tests for SynchronizationEngine."""

    def test_refresh_once_stores_snapshot_and_opens_gate(self, settings, snapshot):
        store = SnapshotStore()
        gate = ReadinessGate()
        engine = SynchronizationEngine(FlakyFetcher(snapshot), store, gate, settings)
        before = _fetches("success")

        assert engine.refresh_once() is True

        assert store.get() is snapshot
        assert store.version == 1
        assert gate.state is ReadinessState.READY
        assert _fetches("success") == before + 1

    def test_transient_failures_are_retried(self, settings, snapshot):
        fetcher = FlakyFetcher(snapshot, failures=1)
        engine = SynchronizationEngine(fetcher, SnapshotStore(), ReadinessGate(), settings)

        assert engine.refresh_once() is True
        assert fetcher.calls == 2

    def test_exhausted_retries_leave_gate_closed(self, settings, snapshot):
        fetcher = FlakyFetcher(snapshot, failures=5)
        gate = ReadinessGate()
        engine = SynchronizationEngine(fetcher, SnapshotStore(), gate, settings)
        before = _fetches("failure")

        assert engine.refresh_once() is False

        assert fetcher.calls == settings.fetch_max_attempts
        assert gate.state is ReadinessState.NOT_READY
        assert _fetches("failure") == before + 1

    def test_permanent_failure_is_not_retried(self, settings, snapshot):
        fetcher = FlakyFetcher(snapshot, failures=5, error=SnapshotFetchError("denied", status_code=401))
        engine = SynchronizationEngine(fetcher, SnapshotStore(), ReadinessGate(), settings)

        assert engine.refresh_once() is False
        assert fetcher.calls == 1

    def test_background_thread_signals_readiness(self, settings):
        store = SnapshotStore()
        gate = ReadinessGate()
        fetcher = HttpSnapshotFetcher("secret", settings, transport=httpx.MockTransport(_handler()))
        engine = SynchronizationEngine(fetcher, store, gate, settings)

        engine.start()
        try:
            assert gate.await_ready(5.0) is ReadinessState.READY
            assert engine.running is True
        finally:
            engine.stop(timeout=2.0)

        assert engine.running is False
        assert store.get().flags["new_dashboard"].keys == {"alice": "on"}

    def test_late_success_after_timeout(self, settings, snapshot):
        """The engine keeps refreshing after a caller gave up waiting."""
        release = threading.Event()

        class GatedFetcher(FlakyFetcher):
            def fetch(self):
                if not release.is_set():
                    raise SnapshotFetchError("not yet", status_code=503)
                return super().fetch()

        gate = ReadinessGate()
        engine = SynchronizationEngine(GatedFetcher(snapshot), SnapshotStore(), gate, settings)
        engine.start()
        try:
            with pytest.raises(TimeoutError):
                gate.await_ready(0.1)
            assert gate.state is ReadinessState.TIMED_OUT

            release.set()
            assert gate.await_ready(5.0) is ReadinessState.READY
        finally:
            engine.stop(timeout=2.0)

    def test_start_twice_is_an_error(self, settings, snapshot):
        engine = SynchronizationEngine(FlakyFetcher(snapshot), SnapshotStore(), ReadinessGate(), settings)
        engine.start()
        try:
            with pytest.raises(RuntimeError):
                engine.start()
        finally:
            engine.stop(timeout=2.0)

    def test_stop_closes_fetcher(self, settings, snapshot):
        fetcher = FlakyFetcher(snapshot)
        engine = SynchronizationEngine(fetcher, SnapshotStore(), ReadinessGate(), settings)

        engine.stop()

        assert fetcher.closed is True

    def test_start_after_stop_is_an_error(self, settings, snapshot):
        engine = SynchronizationEngine(FlakyFetcher(snapshot), SnapshotStore(), ReadinessGate(), settings)
        engine.stop()

        with pytest.raises(RuntimeError, match="already stopped"):
            engine.start()

    def test_stop_returns_while_fetch_in_flight(self, settings, snapshot):
        """stop() honours its timeout; the thread closes the fetcher when the fetch returns."""
        entered = threading.Event()
        release = threading.Event()

        class BlockingFetcher(FlakyFetcher):
            def fetch(self):
                entered.set()
                release.wait(5.0)
                return super().fetch()

        fetcher = BlockingFetcher(snapshot)
        store = SnapshotStore()
        gate = ReadinessGate()
        engine = SynchronizationEngine(fetcher, store, gate, settings)
        engine.start()
        assert entered.wait(2.0) is True

        started = time.monotonic()
        try:
            engine.stop(timeout=0.05)
            elapsed = time.monotonic() - started
            assert fetcher.closed is False
        finally:
            release.set()

        deadline = time.monotonic() + 2.0
        while engine.running and time.monotonic() < deadline:
            time.sleep(0.01)

        assert elapsed < 0.5
        assert engine.running is False
        assert fetcher.closed is True
        assert store.get() is None
        assert gate.state is ReadinessState.NOT_READY


@pytest.mark.unit
class TestSnapshotStore:
    """Tests for SnapshotStore."""

    def test_put_increments_version(self, snapshot):
        store = SnapshotStore()

        assert store.get() is None
        assert store.version == 0
        assert store.put(snapshot) == 1
        assert store.put(snapshot) == 2
        assert store.version == 2
