"""Treatment evaluation against a snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .treatments import Treatments

if TYPE_CHECKING:
    from .schemas import Snapshot


def evaluate(snapshot: Snapshot, key: str, flag_name: str) -> str:
    """Compute the treatment ``key`` receives for ``flag_name``.

    Order of precedence:
    1. Unknown flag -> control
    2. Killed flag -> default treatment
    3. Explicit key assignment
    4. First segment rule whose segment contains the key
    5. Default treatment
    """
    flag = snapshot.flags.get(flag_name)
    if flag is None:
        return Treatments.CONTROL

    if flag.killed:
        return flag.default_treatment

    if key in flag.keys:
        return flag.keys[key]

    for rule in flag.segment_rules:
        if key in snapshot.segments.get(rule.segment, ()):
            return rule.treatment

    return flag.default_treatment
