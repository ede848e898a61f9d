"""Rich renderables for explorer rows and run summaries."""

from __future__ import annotations

from collections.abc import Sequence

from rich.table import Table
from rich.text import Text

from runview.explorer.nodes import FileNode, UiNode
from runview.explorer.summary import Summary

_STATE_ICONS: dict[str | None, tuple[str, str]] = {
    "pass": ("✓", "green"),
    "fail": ("✗", "red"),
    "skip": ("↓", "yellow"),
    "todo": ("…", "yellow"),
    None: ("•", "dim"),
}


def _icon(node: UiNode) -> Text:
    if node.mode in ("skip", "todo") and node.state is None:
        symbol, style = _STATE_ICONS[node.mode]
    else:
        symbol, style = _STATE_ICONS.get(node.state, _STATE_ICONS[None])
    return Text(symbol, style=style)


def _label(node: UiNode, flat: bool) -> Text:
    indent = "" if flat else "  " * node.indent
    marker = ""
    if node.expandable and not flat:
        marker = "▾ " if node.expanded else "▸ "
    label = Text(f"{indent}{marker}")
    label.append(node.name, style="bold" if isinstance(node, FileNode) else "")
    if isinstance(node, FileNode) and node.project_name:
        label.append(f" [{node.project_name}]", style=node.project_name_color or "dim")
    return label


def make_rows_table(rows: Sequence[UiNode], *, flat: bool = False) -> Table:
    """Table of visible explorer rows, indented by depth unless ``flat``."""
    table = Table(show_header=False, box=None, padding=(0, 1), pad_edge=False)
    table.add_column("state", width=1)
    table.add_column("name")
    table.add_column("duration", justify="right", style="dim")

    for node in rows:
        duration = f"{node.duration}ms" if node.duration is not None else ""
        table.add_row(_icon(node), _label(node, flat), duration)
    return table


def make_summary_table(summary: Summary) -> Table:
    """Two-column table of summary counters."""
    table = Table(show_header=False, box=None, padding=(0, 1), pad_edge=False)
    table.add_column("label", style="cyan")
    table.add_column("value", justify="right")

    table.add_row(
        "Files",
        f"{summary.files} ({summary.files_failed} failed, {summary.files_success} passed, "
        f"{summary.files_ignore} skipped, {summary.files_running} running)",
    )
    table.add_row(
        "Tests",
        f"{summary.tests} ({summary.tests_failed} failed, {summary.tests_success} passed, "
        f"{summary.tests_ignore} skipped, {summary.tests_running} running)",
    )
    table.add_row("Time", summary.elapsed)
    if summary.failed_snapshot:
        table.add_row("Snapshots", Text("mismatched", style="red"))
    return table
