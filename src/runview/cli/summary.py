"""runview summary command - print run counters for a recorded run."""

import json
from pathlib import Path

import click
from rich.console import Console

from runview.cli.render import make_summary_table
from runview.cli.utils import replay_recording


@click.command()
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def summary_command(events_file: Path, as_json: bool) -> None:
    """Print file and test counters for EVENTS_FILE."""
    engine = replay_recording(events_file)
    if as_json:
        click.echo(json.dumps(engine.summary.to_dict(), indent=2))
        return
    Console().print(make_summary_table(engine.summary))
