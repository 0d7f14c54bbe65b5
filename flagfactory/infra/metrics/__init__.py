"""Metrics infrastructure for Prometheus monitoring."""

from __future__ import annotations

from flagfactory.infra.metrics import tracking
from flagfactory.infra.metrics.prometheus import REGISTRY

__all__ = [
    "REGISTRY",
    "tracking",
]
