"""Main CLI entry point for outbox-service management commands."""

import click

from outbox_service import __version__
from outbox_service.cli.commands import outbox, server
from outbox_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="outbox-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Outbox Service CLI.

    \b
    Command Groups:
      server     Run the API (and the outbox worker with it)
      outbox     Inspect and drain the transactional outbox
    """
    ctx.ensure_object(dict)


cli.add_command(server.server)
cli.add_command(outbox.outbox)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
