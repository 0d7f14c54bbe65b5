"""Exception types and statistics helpers for retry utilities."""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass
class RetryStatistics:
    """Statistics captured while one call is being retried."""

    operation: str = ""
    attempts: int = 0
    total_delay: float = 0.0
    start_time: float = field(default_factory=time.monotonic)
    end_time: float | None = None
    exceptions: list[str] = field(default_factory=list)

    def record_failure(self, exc: Exception, delay: float) -> None:
        self.attempts += 1
        self.total_delay += delay
        self.exceptions.append(type(exc).__name__)

    def finish(self) -> None:
        self.end_time = time.monotonic()

    @property
    def duration(self) -> float:
        """Seconds between the first attempt and finish() (or now)."""
        end = self.end_time if self.end_time is not None else time.monotonic()
        return end - self.start_time


class RetryError(Exception):
    """Raised after every attempt of a retried call has failed."""

    def __init__(
        self,
        last_exception: Exception,
        attempts: int,
        statistics: RetryStatistics | None = None,
    ) -> None:
        self.last_exception = last_exception
        self.attempts = attempts
        self.statistics = statistics
        operation = statistics.operation if statistics and statistics.operation else "operation"
        super().__init__(f"{operation} failed after {attempts} attempts: {last_exception}")
