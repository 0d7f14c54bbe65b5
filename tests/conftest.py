"""Pytest configuration and shared fixtures.

Organization:
    - Environment Fixtures: settings isolation
    - Engine Fixtures: fake synchronization engines for the builder
    - Snapshot Fixtures: sample flag data
"""

from __future__ import annotations

import os
import threading
from typing import TYPE_CHECKING

import pytest

from flagfactory.core.settings import FactorySettings, clear_all_caches
from flagfactory.features.evaluation.schemas import (
    FlagDefinition,
    SegmentRule,
    Snapshot,
)
from flagfactory.features.factory import FactoryBuilder

if TYPE_CHECKING:
    from collections.abc import Callable

    from flagfactory.features.factory.readiness import ReadinessGate
    from flagfactory.features.sync.storage import SnapshotStore


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Run every test without FLAGS_/LOG_ variables or stray conf/ files."""
    for name in list(os.environ):
        if name.startswith(("FLAGS_", "LOG_")):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def settings() -> FactorySettings:
    """Settings pointing at an unroutable test URL with fast retries."""
    return FactorySettings(
        sdk_url="http://flags.test/api",
        features_refresh_rate=0.05,
        fetch_max_attempts=2,
        fetch_initial_delay=0.0,
    )


# ============================================================================
# Engine Fixtures
# ============================================================================


class FakeEngine:
    """Stand-in for SynchronizationEngine.

    ``ready_after``: None never signals readiness, 0 signals on start,
    a positive number signals from a timer thread after that many seconds.
    """

    def __init__(
        self,
        token: str,
        gate: ReadinessGate,
        store: SnapshotStore,
        ready_after: float | None = None,
        snapshot: Snapshot | None = None,
    ) -> None:
        self.token = token
        self.gate = gate
        self.store = store
        self.ready_after = ready_after
        self.snapshot = snapshot
        self.started = False
        self.stopped = False
        self.stop_timeout: float | None = None
        self._timer: threading.Timer | None = None

    def _become_ready(self) -> None:
        if self.snapshot is not None:
            self.store.put(self.snapshot)
        self.gate.set_ready()

    def start(self) -> None:
        self.started = True
        if self.ready_after == 0:
            self._become_ready()
        elif self.ready_after is not None:
            self._timer = threading.Timer(self.ready_after, self._become_ready)
            self._timer.daemon = True
            self._timer.start()

    def stop(self, timeout: float | None = None) -> None:
        self.stopped = True
        self.stop_timeout = timeout
        if self._timer is not None:
            self._timer.cancel()


class EngineRecorder:
    """Engine factory that records every engine it creates."""

    def __init__(
        self,
        ready_after: float | None = None,
        snapshot: Snapshot | None = None,
        on_create: Callable[[], None] | None = None,
    ) -> None:
        self.ready_after = ready_after
        self.snapshot = snapshot
        self.on_create = on_create
        self.engines: list[FakeEngine] = []
        self._lock = threading.Lock()

    def __call__(self, token, settings, store, gate) -> FakeEngine:
        if self.on_create is not None:
            self.on_create()
        engine = FakeEngine(token, gate, store, self.ready_after, self.snapshot)
        with self._lock:
            self.engines.append(engine)
        return engine


@pytest.fixture
def engine_recorder() -> EngineRecorder:
    """Engine factory whose engines never become ready."""
    return EngineRecorder()


@pytest.fixture
def make_builder(settings: FactorySettings):
    """Create isolated builders with configurable fake engines.

    Returns:
        Callable returning ``(builder, recorder)``.
    """

    def _make(
        ready_after: float | None = None,
        snapshot: Snapshot | None = None,
        on_create: Callable[[], None] | None = None,
        lock: threading.Lock | None = None,
        builder_settings: FactorySettings | None = None,
    ) -> tuple[FactoryBuilder, EngineRecorder]:
        recorder = EngineRecorder(ready_after, snapshot, on_create)
        builder = FactoryBuilder(
            builder_settings or settings,
            lock=lock if lock is not None else threading.Lock(),
            engine_factory=recorder,
        )
        return builder, recorder

    return _make


@pytest.fixture
def builder(settings: FactorySettings, engine_recorder: EngineRecorder) -> FactoryBuilder:
    """Builder with its own lock and fake engines."""
    return FactoryBuilder(settings, lock=threading.Lock(), engine_factory=engine_recorder)


# ============================================================================
# Snapshot Fixtures
# ============================================================================


@pytest.fixture
def snapshot() -> Snapshot:
    """Two flags: one with key and segment targeting, one killed."""
    return Snapshot(
        flags={
            "new_dashboard": FlagDefinition(
                name="new_dashboard",
                default_treatment="off",
                keys={"alice": "on"},
                segment_rules=[SegmentRule(segment="beta", treatment="on")],
            ),
            "checkout_v2": FlagDefinition(
                name="checkout_v2",
                killed=True,
                default_treatment="off",
                keys={"alice": "on"},
            ),
        },
        segments={"beta": frozenset({"bob", "carol"})},
    )


@pytest.fixture
def override_home(tmp_path):
    """Directory holding a .split override file."""
    home = tmp_path / "home"
    home.mkdir()
    (home / ".split").write_text(
        "# local overrides\nflagA on\n\nflagB off\n",
        encoding="utf-8",
    )
    return home
