"""Synchronous retry with exponential backoff for blocking I/O."""

from __future__ import annotations

from flagfactory.utils.retry.decorator import retry
from flagfactory.utils.retry.exceptions import RetryError, RetryStatistics
from flagfactory.utils.retry.strategies import RetryStrategy

__all__ = ["RetryError", "RetryStatistics", "RetryStrategy", "retry"]
