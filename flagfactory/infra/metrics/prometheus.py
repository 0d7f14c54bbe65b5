"""Prometheus metrics for factory construction, readiness and synchronization."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

# Package-owned registry, shared by every factory in the process
REGISTRY = CollectorRegistry()

# Readiness waits range from instant (local mode) to tens of seconds
READY_WAIT_BUCKETS = (
    0.001,
    0.01,
    0.05,
    0.1,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
    30.0,
    60.0,
)

# Factory lifecycle
factory_builds_total = Counter(
    "flagfactory_factory_builds_total",
    "Total factories constructed",
    ["mode"],
    registry=REGISTRY,
)

factories_active = Gauge(
    "flagfactory_factories_active",
    "Factories constructed and not yet destroyed",
    ["mode"],
    registry=REGISTRY,
)

factory_build_duration_seconds = Histogram(
    "flagfactory_factory_build_duration_seconds",
    "Time spent inside the serialized remote construction section",
    buckets=READY_WAIT_BUCKETS,
    registry=REGISTRY,
)

# Readiness
ready_waits_total = Counter(
    "flagfactory_ready_waits_total",
    "Readiness waits by outcome",
    ["outcome"],
    registry=REGISTRY,
)

ready_wait_duration_seconds = Histogram(
    "flagfactory_ready_wait_seconds",
    "Time callers spent blocked waiting for readiness",
    buckets=READY_WAIT_BUCKETS,
    registry=REGISTRY,
)

# Synchronization
sync_fetches_total = Counter(
    "flagfactory_sync_fetches_total",
    "Snapshot fetch cycles by outcome",
    ["outcome"],
    registry=REGISTRY,
)

snapshot_flags = Gauge(
    "flagfactory_snapshot_flags",
    "Flags in the most recently loaded snapshot",
    registry=REGISTRY,
)

# Retry helper
retry_attempts_total = Counter(
    "flagfactory_retry_attempts_total",
    "Total number of retry attempts",
    ["operation", "attempt_number"],
    registry=REGISTRY,
)

retry_exhausted_total = Counter(
    "flagfactory_retry_exhausted_total",
    "Total number of operations that exhausted all retries",
    ["operation"],
    registry=REGISTRY,
)

retry_success_after_failure_total = Counter(
    "flagfactory_retry_success_after_failure_total",
    "Total number of operations that succeeded after retry",
    ["operation", "attempts_needed"],
    registry=REGISTRY,
)
