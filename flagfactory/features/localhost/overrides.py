"""Local override file discovery and parsing.

File format (UTF-8), one override per line:

    # comment
    new_dashboard on
    checkout_v2   off

Blank lines and ``#`` comments are ignored. Any other line must contain
exactly a flag name and a treatment separated by whitespace. A flag listed
twice takes its last value.
"""

from __future__ import annotations

import logging
from pathlib import Path

from flagfactory.core.exceptions import OverrideSourceError

logger = logging.getLogger(__name__)

OVERRIDE_FILE_NAME = ".split"


def resolve_override_path(home: str | Path | None = None) -> Path:
    """Locate the override file.

    Args:
        home: A directory holding ``.split`` or the override file itself.
            Defaults to the user's home directory.

    Returns:
        Path of the override file (not checked for existence).
    """
    base = Path(home).expanduser() if home is not None else Path.home()
    if base.is_dir():
        return base / OVERRIDE_FILE_NAME
    return base


def parse_overrides(text: str, source: str = "<string>") -> dict[str, str]:
    """Parse override text into ``{flag_name: treatment}``.

    Raises:
        OverrideSourceError: A line is neither blank, a comment, nor a pair.
    """
    overrides: dict[str, str] = {}
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split()
        if len(parts) != 2:
            raise OverrideSourceError(
                f"{source}:{lineno}: expected '<flag> <treatment>', got {raw!r}",
                path=source,
                line=lineno,
            )

        flag_name, treatment = parts
        if flag_name in overrides:
            logger.debug("Override for %s redefined at %s:%d", flag_name, source, lineno)
        overrides[flag_name] = treatment

    return overrides


def load_overrides(home: str | Path | None = None) -> dict[str, str]:
    """Read and parse the override file once.

    Raises:
        OverrideSourceError: The file cannot be read or parsed.
    """
    path = resolve_override_path(home)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise OverrideSourceError(
            f"Could not read override file {path}: {exc}",
            path=str(path),
        ) from exc

    overrides = parse_overrides(text, source=str(path))
    logger.info("Loaded %d local overrides from %s", len(overrides), path)
    return overrides
