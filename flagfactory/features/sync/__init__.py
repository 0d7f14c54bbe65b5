"""Background synchronization of flag snapshots."""

from __future__ import annotations

from .engine import Engine, SynchronizationEngine, create_http_engine
from .fetcher import HttpSnapshotFetcher, SnapshotFetcher
from .storage import SnapshotStore

__all__ = [
    "Engine",
    "HttpSnapshotFetcher",
    "SnapshotFetcher",
    "SnapshotStore",
    "SynchronizationEngine",
    "create_http_engine",
]
