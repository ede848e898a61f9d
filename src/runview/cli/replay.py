"""runview replay command - rebuild the explorer from a recorded run."""

import json
from pathlib import Path

import click
from rich.console import Console

from runview.cli.render import make_rows_table, make_summary_table
from runview.cli.utils import node_to_dict, replay_recording
from runview.core.progress import pluralize, status


@click.command()
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--search", default="", help="Case-insensitive name filter")
@click.option("--failed", is_flag=True, help="Show failed tests")
@click.option("--success", is_flag=True, help="Show passed tests")
@click.option("--skipped", is_flag=True, help="Show skipped and todo tests")
@click.option("--only-tests", is_flag=True, help="Flat list of tests only")
@click.option("--expand-all", is_flag=True, help="Expand every file and suite")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def replay_command(
    events_file: Path,
    search: str,
    failed: bool,
    success: bool,
    skipped: bool,
    only_tests: bool,
    expand_all: bool,
    as_json: bool,
) -> None:
    """Replay EVENTS_FILE (one runner event per line) and print the visible rows."""
    engine = replay_recording(
        events_file,
        expand_all=expand_all,
        search=search,
        failed=failed,
        success=success,
        skipped=skipped,
        only_tests=only_tests,
    )

    if as_json:
        click.echo(
            json.dumps(
                {
                    "rows": [node_to_dict(node) for node in engine.rows],
                    "summary": engine.summary.to_dict(),
                    "filtered_summary": engine.filtered_summary.to_dict(),
                },
                indent=2,
            )
        )
        return

    console = Console()
    console.print(make_rows_table(engine.rows, flat=only_tests))
    console.print()
    console.print(make_summary_table(engine.filtered_summary))
    if engine.unhandled_errors:
        status(
            f"{pluralize(len(engine.unhandled_errors), 'unhandled error')} reported by the runner",
            style="error",
        )
