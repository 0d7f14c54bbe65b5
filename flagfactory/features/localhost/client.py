"""Client serving fixed treatments from local overrides."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from flagfactory.features.evaluation.treatments import Treatments


class LocalhostClient:
    """Every key gets the override treatment; unknown flags get ``control``."""

    def __init__(self, overrides: Mapping[str, str]) -> None:
        self._overrides = MappingProxyType(dict(overrides))
        self._destroyed = False

    @property
    def overrides(self) -> Mapping[str, str]:
        return self._overrides

    def get_treatment(self, key: str, flag_name: str) -> str:
        if self._destroyed or not key:
            return Treatments.CONTROL
        return self._overrides.get(flag_name, Treatments.CONTROL)

    def destroy(self) -> None:
        self._destroyed = True
