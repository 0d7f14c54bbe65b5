"""Treatment labels shared by every client."""

from __future__ import annotations

from enum import StrEnum


class Treatments(StrEnum):
    """Well-known treatment labels.

    Flags may serve any string; these are the ones the package itself
    produces or interprets.
    """

    ON = "on"
    OFF = "off"
    CONTROL = "control"  # Served when no decision can be made


def is_on(treatment: str) -> bool:
    """Normalize a treatment to a boolean: only ``on`` counts as on."""
    return treatment == Treatments.ON
