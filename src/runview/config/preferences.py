"""Persisted explorer UI preferences.

Preferences are a flat key/value mapping stored in
.runview/preferences.yaml. The file is auto-generated: unknown keys are
ignored on load and a corrupt file falls back to defaults, so older or newer
versions of the tool can share a workspace.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = structlog.get_logger()

PREFERENCES_HEADER = """\
# AUTO-GENERATED - DO NOT EDIT MANUALLY
# Explorer state (expanded nodes and filters) for this workspace.

"""


class UiPreferences(BaseModel):
    """Explorer state that survives restarts."""

    model_config = ConfigDict(extra="ignore")

    expanded: list[str] = Field(
        default_factory=list,
        description="Ids of expanded files and suites, in expansion order.",
    )
    search: str = ""
    failed: bool = False
    success: bool = False
    skipped: bool = False
    only_tests: bool = False
    expand_all: bool | None = None


class PreferenceStore:
    """Read/write access to UiPreferences.

    With ``path=None`` the store is memory-only, which is what tests and
    one-shot CLI commands use.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._prefs = self.load()

    @property
    def preferences(self) -> UiPreferences:
        return self._prefs

    def load(self) -> UiPreferences:
        """Read preferences from disk; missing or corrupt files give defaults."""
        if self.path is None or not self.path.exists():
            return UiPreferences()
        try:
            with self.path.open() as f:
                data = yaml.safe_load(f) or {}
            return UiPreferences(**data)
        except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
            logger.warning("preferences_unreadable", path=str(self.path), error=str(e))
            return UiPreferences()

    def update(self, **changes: Any) -> UiPreferences:
        """Apply changes and write them through to disk."""
        self._prefs = self._prefs.model_copy(update=changes)
        self.save()
        return self._prefs

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = self._prefs.model_dump()
        content = PREFERENCES_HEADER + yaml.dump(data, default_flow_style=False, sort_keys=False)
        self.path.write_text(content)
