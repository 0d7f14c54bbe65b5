"""Evaluation clients handed out by factories."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .evaluator import evaluate
from .treatments import Treatments

if TYPE_CHECKING:
    from flagfactory.features.sync.storage import SnapshotStore

logger = logging.getLogger(__name__)


@runtime_checkable
class FlagClient(Protocol):
    """Evaluation contract every factory's client satisfies."""

    def get_treatment(self, key: str, flag_name: str) -> str: ...


class SnapshotClient:
    """Client evaluating against the latest snapshot in a store.

    Returns ``control`` until the first snapshot has been loaded and after the
    owning factory has been destroyed.
    """

    def __init__(self, store: SnapshotStore) -> None:
        self._store = store
        self._destroyed = False

    def get_treatment(self, key: str, flag_name: str) -> str:
        if not key or not flag_name:
            logger.warning(
                "get_treatment called with empty key or flag name",
                extra={"key": key, "flag_name": flag_name},
            )
            return Treatments.CONTROL

        if self._destroyed:
            return Treatments.CONTROL

        snapshot = self._store.get()
        if snapshot is None:
            logger.debug("No snapshot loaded yet, serving control for %s", flag_name)
            return Treatments.CONTROL

        return evaluate(snapshot, key, flag_name)

    def destroy(self) -> None:
        self._destroyed = True
