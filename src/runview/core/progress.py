"""User-facing console output for CLI commands.

Usage::

    from runview.core.progress import status

    status("Replaying 120 events...")
    status("Run finished", style="success")  # ✓ Run finished
    status("3 events could not be decoded", style="error")  # ✗ ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

# Console for output
_console = Console(stderr=True)

# Style prefixes
_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def _get_logger() -> BoundLogger:
    """Lazy logger to respect runtime configuration."""
    import structlog

    return structlog.get_logger()  # type: ignore[no-any-return]


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{message}", highlight=False)

    # Log at DEBUG for observability (lazy to respect runtime config)
    _get_logger().debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return ``"1 file"`` / ``"3 files"`` style counts."""
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"
