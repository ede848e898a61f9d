"""CLI utilities."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import click

from runview.client.events import dispatch, read_events
from runview.config.loader import load_config
from runview.core.errors import ConfigError, EventError
from runview.explorer.engine import ExplorerEngine
from runview.explorer.nodes import FileNode, UiNode


def replay_recording(
    events_file: Path,
    *,
    workspace_root: Path | None = None,
    expand_all: bool = False,
    **filters: Any,
) -> ExplorerEngine:
    """Feed a JSONL recording through a fresh engine and return it.

    The engine is driven inside its own event loop so the scheduler's
    ticker and fallback timer behave as they would live. A recording that
    ends without ``onFinished`` is finished here so the final full pass
    still runs.

    Raises:
        click.ClickException: If the config or the recording cannot be read.
    """
    try:
        config = load_config(workspace_root or Path.cwd())
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    async def _run() -> ExplorerEngine:
        engine = ExplorerEngine(config)
        for event in read_events(events_file):
            dispatch(engine, event)
            # Let the ticker observe pending work between events
            await asyncio.sleep(0)
        if engine.running:
            engine.end_run()
        if expand_all:
            engine.expand_all_nodes()
        if filters:
            engine.set_filter(**filters)
        await engine.scheduler.close()
        return engine

    try:
        return asyncio.run(_run())
    except EventError as e:
        raise click.ClickException(str(e)) from e


def node_to_dict(node: UiNode) -> dict[str, Any]:
    """JSON-friendly view of one visible row."""
    data: dict[str, Any] = {
        "id": node.id,
        "parent_id": node.parent_id,
        "name": node.name,
        "type": node.type,
        "mode": node.mode,
        "state": node.state,
        "duration": node.duration,
        "indent": node.indent,
        "expanded": node.expanded,
    }
    if isinstance(node, FileNode):
        data["filepath"] = node.filepath
        data["project_name"] = node.project_name
    return data
