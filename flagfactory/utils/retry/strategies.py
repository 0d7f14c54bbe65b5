from __future__ import annotations

import random
from collections.abc import Callable


class RetryStrategy:
    """Backoff policy for the synchronous ``retry`` decorator.

    Delay for attempt ``n`` (0-indexed) is
    ``min(initial_delay * exponential_base**n, max_delay)``, optionally scaled
    by a random factor drawn from ``jitter_range``.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
        jitter_range: tuple[float, float] = (0.5, 1.5),
        exceptions: tuple[type[Exception], ...] = (Exception,),
        retry_if: Callable[[Exception], bool] | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.jitter_range = jitter_range
        self.exceptions = exceptions
        self.retry_if = retry_if

    def should_retry(self, exception: Exception) -> bool:
        if not isinstance(exception, self.exceptions):
            return False
        if self.retry_if is not None:
            return self.retry_if(exception)
        return True

    def calculate_delay(self, attempt: int) -> float:
        delay = min(self.initial_delay * (self.exponential_base**attempt), self.max_delay)
        if self.jitter:
            low, high = self.jitter_range
            delay *= random.uniform(low, high)
        return delay
