"""Treatment evaluation.

Usage:
    from flagfactory.features.evaluation import Snapshot, evaluate

    treatment = evaluate(snapshot, "user-123", "new_dashboard")
"""

from __future__ import annotations

from .client import FlagClient, SnapshotClient
from .evaluator import evaluate
from .schemas import (
    FlagDefinition,
    FlagListResponse,
    SegmentResponse,
    SegmentRule,
    Snapshot,
)
from .treatments import Treatments, is_on

__all__ = [
    "FlagClient",
    "FlagDefinition",
    "FlagListResponse",
    "SegmentResponse",
    "SegmentRule",
    "Snapshot",
    "SnapshotClient",
    "Treatments",
    "evaluate",
    "is_on",
]
