"""runview CLI - runview command."""

import click

from runview.cli.replay import replay_command
from runview.cli.summary import summary_command
from runview.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="runview")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """runview - Live test-run explorer core."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(replay_command, name="replay")
cli.add_command(summary_command, name="summary")


if __name__ == "__main__":
    cli()
