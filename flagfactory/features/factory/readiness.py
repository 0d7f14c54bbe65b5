"""Readiness gating for factories.

A ReadinessGate arbitrates callers waiting for a factory's first complete
snapshot. The synchronization engine calls ``set_ready()`` exactly when that
snapshot lands; any number of threads may block in ``await_ready()`` and all
of them are released together.

Outcomes of a wait:
    READY        -> returned
    deadline     -> ReadinessTimeoutError (TimeoutError)
    cancelled    -> ReadinessInterruptedError (InterruptedError)

A timed-out wait leaves the gate in TIMED_OUT, which is not terminal for the
gate: the engine keeps running and a later ``set_ready()`` still promotes it to
READY.

Example:
    >>> gate = ReadinessGate()
    >>> cancellation = Cancellation()
    >>> try:
    ...     gate.await_ready(5.0, cancellation=cancellation)
    ... except ReadinessTimeoutError:
    ...     logger.warning("Not ready yet, serving control")
"""

from __future__ import annotations

from enum import StrEnum
import logging
import math
from numbers import Real
import threading
import time
from typing import TYPE_CHECKING

from flagfactory.core.exceptions import (
    InvalidArgumentError,
    ReadinessInterruptedError,
    ReadinessTimeoutError,
)
from flagfactory.infra.metrics.tracking import track_ready_wait

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class ReadinessState(StrEnum):
    """Readiness of a factory.

    Attributes:
        NOT_READY: No complete snapshot yet and no waiter has given up.
        READY: A complete snapshot has been loaded. Terminal.
        TIMED_OUT: A waiter's deadline passed first. Can still become READY.
    """

    NOT_READY = "not_ready"
    READY = "ready"
    TIMED_OUT = "timed_out"


def validate_timeout(timeout: object) -> float:
    """Return ``timeout`` as a float or raise InvalidArgumentError.

    Accepts finite, strictly positive real numbers. Booleans are rejected.
    """
    if isinstance(timeout, bool) or not isinstance(timeout, Real):
        raise InvalidArgumentError(
            f"timeout must be a number of seconds, got {type(timeout).__name__}",
            argument="timeout",
        )
    value = float(timeout)
    if not math.isfinite(value) or value <= 0:
        raise InvalidArgumentError(
            f"timeout must be positive, got {timeout!r}",
            argument="timeout",
        )
    return value


class Cancellation:
    """One-shot, thread-safe cancellation token.

    Hand one to ``ReadinessGate.await_ready`` and call ``cancel()`` from any
    other thread to interrupt that wait. Cancelling never affects the
    synchronization engine.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> bool:
        """Register ``callback`` to run on cancel().

        Returns:
            False if already cancelled; the callback is not registered.
        """
        with self._lock:
            if self._cancelled:
                return False
            self._callbacks.append(callback)
            return True

    def remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)


class ReadinessGate:
    """Broadcast readiness signal with per-caller deadlines."""

    def __init__(self, state: ReadinessState = ReadinessState.NOT_READY) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._state = state

    @classmethod
    def ready(cls) -> ReadinessGate:
        """A gate that is already open (local mode)."""
        return cls(ReadinessState.READY)

    @property
    def state(self) -> ReadinessState:
        with self._condition:
            return self._state

    def is_ready(self) -> bool:
        with self._condition:
            return self._state is ReadinessState.READY

    def set_ready(self) -> None:
        """Mark the gate READY and wake every waiter. Idempotent."""
        with self._condition:
            if self._state is ReadinessState.READY:
                return
            self._state = ReadinessState.READY
            self._condition.notify_all()

    def await_ready(
        self,
        timeout: float,
        cancellation: Cancellation | None = None,
    ) -> ReadinessState:
        """Block until READY, the deadline, or cancellation.

        Args:
            timeout: Seconds to wait. Must be positive.
            cancellation: Optional token; cancelling it interrupts this wait.

        Returns:
            ReadinessState.READY

        Raises:
            InvalidArgumentError: Timeout is not a positive number.
            ReadinessTimeoutError: Deadline passed before READY.
            ReadinessInterruptedError: Cancelled while waiting.
        """
        seconds = validate_timeout(timeout)
        started = time.monotonic()
        deadline = started + seconds

        wake = self._notify_waiters
        if cancellation is not None and not cancellation.add_callback(wake):
            # Cancelled before we started; READY still wins
            if self.is_ready():
                track_ready_wait("ready", 0.0)
                return ReadinessState.READY
            track_ready_wait("interrupted", 0.0)
            raise ReadinessInterruptedError("Readiness wait was cancelled before it started")

        try:
            with self._condition:
                while self._state is not ReadinessState.READY:
                    if cancellation is not None and cancellation.cancelled:
                        track_ready_wait("interrupted", time.monotonic() - started)
                        logger.info("Readiness wait interrupted after %.3fs", time.monotonic() - started)
                        raise ReadinessInterruptedError()

                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        self._state = ReadinessState.TIMED_OUT
                        track_ready_wait("timeout", time.monotonic() - started)
                        logger.warning(
                            "Factory not ready after %.3fs",
                            seconds,
                            extra={"timeout": seconds},
                        )
                        raise ReadinessTimeoutError(seconds)

                    self._condition.wait(remaining)
        finally:
            if cancellation is not None:
                cancellation.remove_callback(wake)

        track_ready_wait("ready", time.monotonic() - started)
        return ReadinessState.READY

    def _notify_waiters(self) -> None:
        with self._condition:
            self._condition.notify_all()
