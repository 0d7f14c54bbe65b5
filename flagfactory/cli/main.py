"""Main CLI entry point: evaluate flags interactively from stdin."""

from __future__ import annotations

import sys

import click

from flagfactory.cli.formatters import error, info
from flagfactory.cli.loop import run_evaluation_loop
from flagfactory.core.exceptions import FlagFactoryError
from flagfactory.features.factory import build
from flagfactory.infra.logging.config import setup_logging

USAGE = "Usage: <api_token>"


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.version_option(version="0.1.0", prog_name="flagfactory")
@click.pass_context
def cli(ctx: click.Context, args: tuple[str, ...]) -> None:
    """Evaluate feature flags for <api_token>.

    Reads '<key> <flag_name>' lines from stdin and prints 'on' or 'off' for
    each. Type 'exit' to quit. Use the token 'localhost' to serve treatments
    from the local override file instead of the remote service.
    """
    if len(args) != 1:
        click.echo(USAGE)
        ctx.exit(1)

    try:
        factory = build(args[0])
    except FlagFactoryError as exc:
        error(f"Could not build factory: {exc.detail}")
        ctx.exit(1)

    if not factory.is_ready():
        info("Factory is still synchronizing; early evaluations may return 'off'")

    try:
        status = run_evaluation_loop(
            factory.client(),
            sys.stdin,
            click.echo,
        )
    finally:
        factory.destroy()

    ctx.exit(status)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli()


if __name__ == "__main__":
    main()
