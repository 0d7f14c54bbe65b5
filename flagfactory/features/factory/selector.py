"""Choose between local override mode and remote mode from the API token."""

from __future__ import annotations

from enum import StrEnum

from flagfactory.core.exceptions import InvalidArgumentError

# Reserved token selecting local override mode
LOCALHOST_TOKEN = "localhost"


class FactoryMode(StrEnum):
    LOCAL = "local"
    REMOTE = "remote"


def select_mode(token: str | None) -> FactoryMode:
    """Route ``token`` to a construction mode.

    Exact match on ``"localhost"`` selects LOCAL. Every other string,
    including the empty string, selects REMOTE.

    Raises:
        InvalidArgumentError: ``token`` is None or not a string.
    """
    if token is None:
        raise InvalidArgumentError("API token must not be None", argument="token")
    if not isinstance(token, str):
        raise InvalidArgumentError(
            f"API token must be a string, got {type(token).__name__}",
            argument="token",
        )
    if token == LOCALHOST_TOKEN:
        return FactoryMode.LOCAL
    return FactoryMode.REMOTE
