"""Thread-safe holder for the latest snapshot."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flagfactory.features.evaluation.schemas import Snapshot


class SnapshotStore:
    """Latest complete snapshot, replaced atomically by the engine."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot: Snapshot | None = None
        self._version = 0

    def get(self) -> Snapshot | None:
        with self._lock:
            return self._snapshot

    def put(self, snapshot: Snapshot) -> int:
        """Replace the stored snapshot and return the new version number."""
        with self._lock:
            self._snapshot = snapshot
            self._version += 1
            return self._version

    @property
    def version(self) -> int:
        with self._lock:
            return self._version
