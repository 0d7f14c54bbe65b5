"""Interactive evaluation loop.

Reads ``<key> <flag_name>`` lines and prints ``on`` or ``off`` for each.
``exit`` ends the loop; so does end of input.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flagfactory.features.evaluation.treatments import Treatments, is_on

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from flagfactory.features.evaluation.client import FlagClient

EXIT_COMMAND = "exit"
UNKNOWN_COMMAND_MESSAGE = "Could not understand command"


def run_evaluation_loop(
    client: FlagClient,
    lines: Iterable[str],
    echo: Callable[[str], None],
) -> int:
    """Evaluate each input line against ``client``.

    Args:
        client: Any object with ``get_treatment(key, flag_name)``.
        lines: Line source, e.g. ``sys.stdin``.
        echo: Output function, e.g. ``click.echo``.

    Returns:
        Exit status, always 0.
    """
    for raw in lines:
        line = raw.rstrip("\r\n")
        if line == EXIT_COMMAND:
            return 0

        parts = line.split()
        if len(parts) != 2:
            echo(UNKNOWN_COMMAND_MESSAGE)
            continue

        key, flag_name = parts
        echo(Treatments.ON if is_on(client.get_treatment(key, flag_name)) else Treatments.OFF)

    return 0
