"""HTTP client for the flag snapshot service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from flagfactory.core.exceptions import SnapshotFetchError
from flagfactory.features.evaluation.schemas import (
    FlagListResponse,
    SegmentResponse,
    Snapshot,
)

if TYPE_CHECKING:
    from flagfactory.core.settings.client import FactorySettings

logger = logging.getLogger(__name__)

USER_AGENT = "flagfactory-python/0.1.0"

M = TypeVar("M", bound=BaseModel)


def is_transient(exc: Exception) -> bool:
    """Network errors and 5xx/429 responses are worth retrying."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, SnapshotFetchError) and exc.status_code is not None:
        return exc.status_code >= 500 or exc.status_code == 429
    return False


class SnapshotFetcher(Protocol):
    """Anything able to produce one complete snapshot."""

    def fetch(self) -> Snapshot: ...

    def close(self) -> None: ...


class HttpSnapshotFetcher:
    """Fetch flags, then every segment they reference.

    Handles:
    - Bearer authentication with the API token
    - Connect and read timeouts from settings
    - Schema validation of both responses
    """

    def __init__(
        self,
        token: str,
        settings: FactorySettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            token: API token sent as bearer credentials.
            settings: Construction settings (base URL and timeouts).
            transport: Optional httpx transport, used by tests.
        """
        self._base_url = settings.sdk_url
        self._client = httpx.Client(
            base_url=settings.sdk_url,
            headers={
                "Authorization": f"Bearer {token}",
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(settings.read_timeout, connect=settings.connect_timeout),
            transport=transport,
        )

    def fetch(self) -> Snapshot:
        """Fetch one complete snapshot.

        Returns:
            Snapshot with every referenced segment populated.

        Raises:
            SnapshotFetchError: Non-2xx status or malformed body.
            httpx.TransportError: Network failure.
        """
        flags = self._parse(FlagListResponse, "/flags")

        names = sorted({name for flag in flags.flags for name in flag.segment_names})
        segments = [
            self._parse(SegmentResponse, f"/segments/{name}")
            for name in names
        ]

        logger.debug(
            "Fetched snapshot with %d flags and %d segments",
            len(flags.flags),
            len(segments),
        )
        try:
            return Snapshot.from_responses(flags, segments)
        except ValidationError as exc:
            raise SnapshotFetchError(f"Inconsistent snapshot: {exc}", url=self._base_url) from exc

    def _parse(self, model: type[M], path: str) -> M:
        try:
            return model.model_validate(self._get_json(path))
        except ValidationError as exc:
            raise SnapshotFetchError(
                f"Malformed response from {path}: {exc.error_count()} validation errors",
                url=f"{self._base_url}{path}",
            ) from exc

    def _get_json(self, path: str) -> object:
        response = self._client.get(path)
        if response.status_code >= 400:
            raise SnapshotFetchError(
                f"Snapshot service returned {response.status_code}",
                status_code=response.status_code,
                url=str(response.request.url),
            )
        try:
            return response.json()
        except ValueError as exc:
            raise SnapshotFetchError(
                "Snapshot service returned invalid JSON",
                status_code=response.status_code,
                url=str(response.request.url),
            ) from exc

    def close(self) -> None:
        self._client.close()
