"""Local override mode: treatments fixed from a file, no network."""

from __future__ import annotations

from .client import LocalhostClient
from .overrides import (
    OVERRIDE_FILE_NAME,
    load_overrides,
    parse_overrides,
    resolve_override_path,
)

__all__ = [
    "OVERRIDE_FILE_NAME",
    "LocalhostClient",
    "load_overrides",
    "parse_overrides",
    "resolve_override_path",
]
