"""Helper functions for tracking factory and synchronization metrics."""

from __future__ import annotations

import logging

from flagfactory.infra.metrics import prometheus

logger = logging.getLogger(__name__)


# ============================================================================
# Factory Lifecycle
# ============================================================================


def track_factory_built(mode: str, duration: float | None = None) -> None:
    """Track a constructed factory.

    Args:
        mode: Construction mode ('local' or 'remote')
        duration: Seconds spent in the construction section, if measured

    Example:
            track_factory_built("remote", 0.002)
    """
    prometheus.factory_builds_total.labels(mode=mode).inc()
    prometheus.factories_active.labels(mode=mode).inc()
    if duration is not None:
        prometheus.factory_build_duration_seconds.observe(duration)


def track_factory_destroyed(mode: str) -> None:
    """Track a destroyed factory.

    Args:
        mode: Construction mode ('local' or 'remote')
    """
    prometheus.factories_active.labels(mode=mode).dec()


# ============================================================================
# Readiness
# ============================================================================


def track_ready_wait(outcome: str, duration: float) -> None:
    """Track a finished readiness wait.

    Args:
        outcome: 'ready', 'timeout' or 'interrupted'
        duration: Seconds the caller was blocked

    Example:
            track_ready_wait("timeout", 5.0)
    """
    prometheus.ready_waits_total.labels(outcome=outcome).inc()
    prometheus.ready_wait_duration_seconds.observe(duration)


# ============================================================================
# Synchronization
# ============================================================================


def track_sync_fetch(outcome: str, flag_count: int | None = None) -> None:
    """Track a snapshot fetch cycle.

    Args:
        outcome: 'success' or 'failure'
        flag_count: Flags in the fetched snapshot, on success
    """
    prometheus.sync_fetches_total.labels(outcome=outcome).inc()
    if flag_count is not None:
        prometheus.snapshot_flags.set(flag_count)


# ============================================================================
# Retry Tracking
# ============================================================================


def track_retry_attempt(operation: str, attempt_number: int) -> None:
    """Track a retry attempt.

    Args:
        operation: Name of the operation being retried
        attempt_number: Current attempt number (1-indexed)

    Example:
            track_retry_attempt("fetch_snapshot", 2)
    """
    prometheus.retry_attempts_total.labels(
        operation=operation,
        attempt_number=str(attempt_number),
    ).inc()


def track_retry_exhausted(operation: str) -> None:
    """Track when all retry attempts are exhausted.

    Args:
        operation: Name of the operation that failed
    """
    prometheus.retry_exhausted_total.labels(operation=operation).inc()


def track_retry_success(operation: str, attempts_needed: int) -> None:
    """Track successful operation after retries.

    Args:
        operation: Name of the operation
        attempts_needed: Number of attempts needed to succeed
    """
    prometheus.retry_success_after_failure_total.labels(
        operation=operation,
        attempts_needed=str(attempts_needed),
    ).inc()
