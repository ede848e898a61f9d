"""Explorer node records.

One node per raw task ever observed. Nodes are mutable and updated in
place by the reconciler, so a reference held by a consumer (the selected
row, say) stays valid across runs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal

from runview.client.models import TaskMode, TaskState, TaskType
from runview.config.constants import PROJECT_NAME_COLORS, ROOT_ID


def project_name_color(name: str | None) -> str:
    """Hash a project name into the display palette. Empty name -> ''."""
    if not name:
        return ""
    index = sum(ord(ch) + idx for idx, ch in enumerate(name))
    return PROJECT_NAME_COLORS[index % len(PROJECT_NAME_COLORS)]


def round_duration(duration: float | None) -> int | None:
    if duration is None:
        return None
    return math.floor(duration + 0.5)


@dataclass(eq=False)
class UiNode:
    """Fields shared by every explorer node.

    ``children`` is a dict used as an insertion-ordered set of child ids.
    """

    id: str
    parent_id: str
    name: str
    type: TaskType
    mode: TaskMode = "run"
    state: TaskState | None = None
    duration: int | None = None
    indent: int = 0
    expanded: bool = False
    children: dict[str, None] = field(default_factory=dict)

    @property
    def expandable(self) -> bool:
        return self.type != "test"

    def add_child(self, child_id: str) -> bool:
        """Append ``child_id`` unless already present. Returns True if added."""
        if child_id in self.children:
            return False
        self.children[child_id] = None
        return True


@dataclass(eq=False)
class FileNode(UiNode):
    type: Literal["file"] = "file"
    filepath: str = ""
    project_name: str | None = None
    project_name_color: str = ""
    collect_duration: float | None = None
    setup_duration: float | None = None
    environment_load: float | None = None
    prepare_duration: float | None = None


@dataclass(eq=False)
class SuiteNode(UiNode):
    type: Literal["suite"] = "suite"


@dataclass(eq=False)
class TestNode(UiNode):
    __test__ = False

    type: Literal["test"] = "test"


@dataclass(eq=False)
class RootNode:
    """Permanent sentinel holding the ordered top-level file ids."""

    id: str = ROOT_ID
    children: dict[str, None] = field(default_factory=dict)

    def add_child(self, child_id: str) -> bool:
        if child_id in self.children:
            return False
        self.children[child_id] = None
        return True
