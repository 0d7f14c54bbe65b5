"""Custom exception classes for factory construction and readiness.

Each error also derives from the matching builtin so callers can catch either
the package type or the standard one:

- InvalidArgumentError -> ValueError
- OverrideSourceError -> OSError
- ReadinessTimeoutError -> TimeoutError
- ReadinessInterruptedError -> InterruptedError
"""

from __future__ import annotations

from typing import Any


class FlagFactoryError(Exception):
    """Base flagfactory exception.

    All custom exceptions should inherit from this class.

    Attributes:
        detail: Human-readable error message.
        extra: Additional context-specific information about the error.

    Example:
            raise FlagFactoryError(
            detail="Factory construction failed",
            extra={"mode": "remote"},
        )
    """

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        """Initialize flagfactory exception.

        Args:
            detail: Human-readable error message.
            extra: Additional context about the error.
        """
        self.detail = detail
        self.extra = extra or {}
        super().__init__(detail)


class InvalidArgumentError(FlagFactoryError, ValueError):
    """Raised when a required input is missing or out of range.

    Example:
            raise InvalidArgumentError(
            detail="timeout must be positive",
            extra={"argument": "timeout", "value": 0},
        )
    """

    def __init__(
        self,
        detail: str,
        argument: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid argument error.

        Args:
            detail: Human-readable error message.
            argument: Name of the offending argument.
            extra: Additional context about the error.
        """
        merged = {**(extra or {})}
        if argument is not None:
            merged["argument"] = argument
        self.argument = argument
        super().__init__(detail=detail, extra=merged)


class OverrideSourceError(FlagFactoryError, OSError):
    """Raised when the local override source cannot be read or parsed."""

    def __init__(
        self,
        detail: str,
        path: str | None = None,
        line: int | None = None,
    ) -> None:
        """Initialize override source error.

        Args:
            detail: Human-readable error message.
            path: Override file that failed.
            line: 1-based line number of a parse failure.
        """
        extra: dict[str, Any] = {}
        if path is not None:
            extra["path"] = path
        if line is not None:
            extra["line"] = line
        self.path = path
        self.line = line
        super().__init__(detail=detail, extra=extra)


class ReadinessTimeoutError(FlagFactoryError, TimeoutError):
    """Raised when a readiness wait reaches its deadline first.

    The factory stays valid and may still become ready later.
    """

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(
            detail=f"Factory was not ready after {timeout:g}s",
            extra={"timeout": timeout},
        )


class ReadinessInterruptedError(FlagFactoryError, InterruptedError):
    """Raised when a readiness wait is cancelled while blocked.

    Readiness is unknown at that point, not "not ready".
    """

    def __init__(self, detail: str = "Readiness wait was interrupted") -> None:
        super().__init__(detail=detail)


class SnapshotFetchError(FlagFactoryError):
    """Raised by the snapshot fetcher when the remote service misbehaves."""

    def __init__(
        self,
        detail: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        """Initialize snapshot fetch error.

        Args:
            detail: Human-readable error message.
            status_code: HTTP status returned by the service, if any.
            url: Requested URL.
        """
        self.status_code = status_code
        self.url = url
        super().__init__(
            detail=detail,
            extra={"status_code": status_code, "url": url},
        )
