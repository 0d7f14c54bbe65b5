"""Snapshot schemas.

A snapshot is one complete, consistent view of flag definitions and the
segment memberships they reference.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .treatments import Treatments


class SegmentRule(BaseModel):
    """Serve ``treatment`` to keys that belong to ``segment``."""

    model_config = ConfigDict(frozen=True)

    segment: str = Field(..., min_length=1)
    treatment: str = Field(..., min_length=1)


class FlagDefinition(BaseModel):
    """A single flag as served by the snapshot service."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Flag name")
    killed: bool = Field(default=False, description="Serve default_treatment to everyone")
    default_treatment: str = Field(default=Treatments.OFF, min_length=1)
    keys: dict[str, str] = Field(
        default_factory=dict,
        description="Explicit key -> treatment assignments",
    )
    segment_rules: list[SegmentRule] = Field(
        default_factory=list,
        description="Evaluated in order, first matching segment wins",
    )

    @property
    def segment_names(self) -> set[str]:
        return {rule.segment for rule in self.segment_rules}


class FlagListResponse(BaseModel):
    """Body of ``GET {sdk_url}/flags``."""

    flags: list[FlagDefinition] = Field(default_factory=list)


class SegmentResponse(BaseModel):
    """Body of ``GET {sdk_url}/segments/{name}``."""

    name: str
    keys: list[str] = Field(default_factory=list)


class Snapshot(BaseModel):
    """Flags keyed by name plus the members of every referenced segment."""

    model_config = ConfigDict(frozen=True)

    flags: dict[str, FlagDefinition] = Field(default_factory=dict)
    segments: dict[str, frozenset[str]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_segments_complete(self) -> Snapshot:
        """Every segment referenced by a flag must be present."""
        missing = {
            name
            for flag in self.flags.values()
            for name in flag.segment_names
            if name not in self.segments
        }
        if missing:
            raise ValueError(f"snapshot is missing segments: {', '.join(sorted(missing))}")
        return self

    @classmethod
    def from_responses(
        cls,
        flags: FlagListResponse,
        segments: list[SegmentResponse],
    ) -> Snapshot:
        return cls(
            flags={flag.name: flag for flag in flags.flags},
            segments={segment.name: frozenset(segment.keys) for segment in segments},
        )
