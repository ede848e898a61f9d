"""Merge raw run state into the node index.

Two strategies share the same upsert primitives and therefore converge on
the same node state:

- Full reconciliation walks every raw file (run start/end, reloads).
- Targeted reconciliation walks only the tasks named in a pending-update
  set plus their ancestor chains (in-progress runs).

Children of a collapsed node are not attached on first sight. Expanding
the node later pulls its current children from raw state via
``attach_children``. Children that are already attached stay current even
while their parent is collapsed.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from runview.client.models import RawFile, RawSuite, RawTask, children_of
from runview.client.state import RawState
from runview.config.constants import ROOT_ID
from runview.core.errors import TreeIndexError
from runview.explorer.expand import ExpandState
from runview.explorer.index import NodeIndex
from runview.explorer.nodes import (
    FileNode,
    SuiteNode,
    TestNode,
    UiNode,
    project_name_color,
    round_duration,
)

logger = structlog.get_logger()


@dataclass
class ReconcileStats:
    """Counters for reconciliation passes."""

    full_passes: int = 0
    targeted_passes: int = 0
    nodes_created: int = 0


class Reconciler:
    """Upserts raw tasks into a NodeIndex."""

    def __init__(
        self,
        index: NodeIndex,
        state: RawState,
        expand: ExpandState,
        *,
        default_expanded: bool = False,
    ) -> None:
        self.index = index
        self.state = state
        self.expand = expand
        self.default_expanded = default_expanded
        # Set while every container is globally expanded
        self.force_expanded = False
        self.stats = ReconcileStats()

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def upsert_file(self, raw: RawFile, deep: bool) -> FileNode:
        """Create or update the node for ``raw``; with ``deep``, its subtree too."""
        node = self.index.get(raw.id)
        if not isinstance(node, FileNode):
            node = FileNode(
                id=raw.id,
                parent_id=ROOT_ID,
                name=raw.name,
                expanded=self._seed_expanded(raw.id),
            )
            self.index.attach(node)
            self.stats.nodes_created += 1
        self._apply_file(node, raw)
        if deep:
            self._sync_children(node, raw)
        return node

    def upsert_task(self, parent_id: str, raw: RawTask, recurse: bool) -> UiNode | None:
        """Create or update a suite/test node under ``parent_id``.

        Returns None when the parent is not indexed; the node is picked up
        by the next full reconciliation.
        """
        parent = self.index.get(parent_id)
        if parent is None:
            logger.debug("attach_skipped", task_id=raw.id, parent_id=parent_id)
            return None

        node = self.index.get(raw.id)
        if node is None:
            node = self._new_task_node(parent, raw)
            try:
                self.index.attach(node)
            except TreeIndexError as e:
                logger.debug("attach_failed", error=e.error_name, **e.details)
                return None
            self.stats.nodes_created += 1
        else:
            if node.parent_id != parent_id:
                self._move(node, parent)
            parent.add_child(node.id)

        self._apply_task(node, raw)
        if recurse and isinstance(raw, RawSuite):
            self._sync_children(node, raw)
        return node

    def attach_children(self, node_id: str) -> None:
        """Pull the current children of ``node_id`` from raw state."""
        node = self.index.get(node_id)
        raw = self.state.get(node_id)
        if node is None or raw is None:
            return
        for child in children_of(raw):
            self.upsert_task(node_id, child, recurse=True)

    def materialize(self, node_id: str) -> None:
        """Attach the whole raw subtree of ``node_id`` regardless of expansion."""
        raw = self.state.get(node_id)
        if raw is None or node_id not in self.index:
            return
        for child in children_of(raw):
            if self.upsert_task(node_id, child, recurse=False) is not None and isinstance(
                child, RawSuite
            ):
                self.materialize(child.id)

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def reconcile_all(self) -> None:
        """Full reconciliation of every raw file."""
        for raw in self.state.files():
            self.upsert_file(raw, deep=True)
        self.stats.full_passes += 1

    def reconcile_pending(self, pending: dict[str, set[str]]) -> None:
        """Targeted reconciliation of the tasks named in ``pending``."""
        for file_id, task_ids in pending.items():
            raw_file = self.state.get_file(file_id)
            if raw_file is None:
                logger.debug("pending_file_unknown", file_id=file_id)
                continue
            self.upsert_file(raw_file, deep=False)
            for task_id in task_ids:
                if task_id != file_id:
                    self._upsert_chain(task_id)
        self.stats.targeted_passes += 1

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _upsert_chain(self, task_id: str) -> None:
        """Upsert ``task_id`` and the suites above it, top-down."""
        if task_id not in self.state:
            logger.debug("pending_task_unknown", task_id=task_id)
            return
        # ancestors() ends at the file, which the caller already upserted
        chain = [*reversed(self.state.ancestors(task_id)[:-1]), task_id]
        for chain_id in chain:
            raw = self.state.get(chain_id)
            parent_id = self.state.parent_of(chain_id)
            if raw is None or parent_id is None:
                return
            parent = self.index.get(parent_id)
            if parent is None:
                return
            if chain_id not in self.index and not parent.expanded:
                return
            self.upsert_task(parent_id, raw, recurse=False)

    def _sync_children(self, node: UiNode, raw: RawFile | RawSuite) -> None:
        if not node.expanded and not node.children:
            return
        for child in raw.tasks:
            if not node.expanded and child.id not in self.index:
                continue
            self.upsert_task(node.id, child, recurse=True)
        self._prune_children(node, raw)

    def _prune_children(self, node: UiNode, raw: RawFile | RawSuite) -> None:
        """Drop attached children that ``raw`` no longer lists.

        A child the runner now reports under another parent is moved there
        when that parent would show it (expanded or already holding attached
        children). Otherwise it is dropped and attached again on expand.
        """
        current = {child.id for child in raw.tasks}
        for child_id in [c for c in node.children if c not in current]:
            node.children.pop(child_id, None)
            child = self.index.get(child_id)
            new_parent_id = self.state.parent_of(child_id)
            new_parent = self.index.get(new_parent_id) if new_parent_id else None
            if child is None:
                continue
            if new_parent is not None and (new_parent.expanded or new_parent.children):
                self._move(child, new_parent)
                new_parent.add_child(child_id)
            else:
                self.index.remove(child_id)

    def _move(self, node: UiNode, parent: UiNode) -> None:
        old_parent = self.index.get(node.parent_id)
        if old_parent is not None:
            old_parent.children.pop(node.id, None)
        node.parent_id = parent.id
        shift = parent.indent + 1 - node.indent
        node.indent += shift
        if shift:
            for child in self.index.descendants(node.id):
                child.indent += shift

    def _new_task_node(self, parent: UiNode, raw: RawTask) -> UiNode:
        if isinstance(raw, RawSuite):
            return SuiteNode(
                id=raw.id,
                parent_id=parent.id,
                name=raw.name,
                indent=parent.indent + 1,
                expanded=self._seed_expanded(raw.id),
            )
        return TestNode(
            id=raw.id,
            parent_id=parent.id,
            name=raw.name,
            indent=parent.indent + 1,
        )

    def _seed_expanded(self, node_id: str) -> bool:
        return self.force_expanded or self.default_expanded or self.expand.is_expanded(node_id)

    @staticmethod
    def _apply_task(node: UiNode, raw: RawTask) -> None:
        node.name = raw.name
        node.mode = raw.mode
        node.state = raw.result.state if raw.result else None
        node.duration = round_duration(raw.result.duration) if raw.result else None

    @classmethod
    def _apply_file(cls, node: FileNode, raw: RawFile) -> None:
        cls._apply_task(node, raw)
        node.filepath = raw.filepath
        if node.project_name != raw.project_name or not node.project_name_color:
            node.project_name = raw.project_name
            node.project_name_color = project_name_color(raw.project_name)
        node.collect_duration = raw.collect_duration
        node.setup_duration = raw.setup_duration
        node.environment_load = raw.environment_load
        node.prepare_duration = raw.prepare_duration
