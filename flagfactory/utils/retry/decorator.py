from __future__ import annotations

from functools import wraps
import logging
import threading
import time
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from flagfactory.infra.metrics.tracking import (
    track_retry_attempt,
    track_retry_exhausted,
    track_retry_success,
)

from .exceptions import RetryError, RetryStatistics
from .strategies import RetryStrategy

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def retry(
    strategy: RetryStrategy | None = None,
    *,
    stop_event: threading.Event | None = None,
    sleep: Callable[[float], None] | None = None,
    on_retry: Callable[[Exception, int], None] | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Retry a blocking callable with exponential backoff.

    Args:
        strategy: Backoff policy. Defaults to ``RetryStrategy()``.
        stop_event: When set, backoff sleeps end early and the last error is
            raised as RetryError without further attempts.
        sleep: Sleep function, replaceable in tests. Ignored when
            ``stop_event`` is given.
        on_retry: Called with the exception and the failed attempt number.

    Raises:
        RetryError: All attempts failed with retryable exceptions.
    """
    policy = strategy or RetryStrategy()
    pause = sleep or time.sleep

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            statistics = RetryStatistics(operation=func.__name__)

            for attempt in range(policy.max_attempts):
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    if not policy.should_retry(e):
                        raise

                    if attempt >= policy.max_attempts - 1:
                        statistics.finish()
                        track_retry_exhausted(func.__name__)
                        logger.error(
                            "All retry attempts exhausted for %s",
                            func.__name__,
                            extra={
                                "function": func.__name__,
                                "attempts": attempt + 1,
                                "last_exception": str(e),
                                "total_delay": statistics.total_delay,
                            },
                        )
                        raise RetryError(e, attempt + 1, statistics) from e

                    delay = policy.calculate_delay(attempt)
                    statistics.record_failure(e, delay)
                    track_retry_attempt(func.__name__, attempt + 2)

                    logger.warning(
                        "Retrying %s after %.2fs (attempt %d/%d)",
                        func.__name__,
                        delay,
                        attempt + 1,
                        policy.max_attempts,
                        extra={"function": func.__name__, "exception": str(e)},
                    )

                    if on_retry:
                        on_retry(e, attempt + 1)

                    if stop_event is not None:
                        if stop_event.wait(delay):
                            statistics.finish()
                            raise RetryError(e, attempt + 1, statistics) from e
                    else:
                        pause(delay)
                else:
                    if statistics.attempts > 0:
                        track_retry_success(func.__name__, statistics.attempts + 1)
                    return result

            msg = "Retry logic error: exhausted all attempts"
            raise RuntimeError(msg)

        return wrapper

    return decorator
