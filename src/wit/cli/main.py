"""wit CLI - wit command."""

import click

from wit.cli.down import down_command
from wit.cli.init import init_command
from wit.cli.status import status_command
from wit.cli.up import up_command
from wit.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="wit")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """wit - Context tree and shared descriptions for your editor."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(init_command, name="init")
cli.add_command(up_command, name="up")
cli.add_command(down_command, name="down")
cli.add_command(status_command, name="status")


if __name__ == "__main__":
    cli()
