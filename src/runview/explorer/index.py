"""Flat node index backing the explorer tree.

Nodes live in a single ``id -> node`` map. Structure is expressed through
``parent_id`` and each node's ordered ``children`` ids, never through
object references, so membership checks and lookups are O(1).
"""

from __future__ import annotations

from collections.abc import Iterator

from runview.config.constants import ROOT_ID
from runview.core.errors import TreeIndexError
from runview.explorer.nodes import FileNode, RootNode, UiNode


class NodeIndex:
    """Arena of explorer nodes plus the root sentinel."""

    def __init__(self) -> None:
        self.root = RootNode()
        self._nodes: dict[str, UiNode] = {}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[UiNode]:
        return iter(self._nodes.values())

    def get(self, node_id: str) -> UiNode | None:
        return self._nodes.get(node_id)

    def require(self, node_id: str) -> UiNode:
        node = self._nodes.get(node_id)
        if node is None:
            raise TreeIndexError.missing_reference(node_id)
        return node

    def files(self) -> list[FileNode]:
        """Top-level file nodes in root order."""
        nodes = (self._nodes.get(node_id) for node_id in self.root.children)
        return [n for n in nodes if isinstance(n, FileNode)]

    def children_of(self, node_id: str) -> list[UiNode]:
        parent = self.root if node_id == ROOT_ID else self._nodes.get(node_id)
        if parent is None:
            return []
        return [self._nodes[c] for c in parent.children if c in self._nodes]

    def attach(self, node: UiNode) -> None:
        """Index ``node`` and append it to its parent's children.

        Raises:
            TreeIndexError: the parent is not indexed.
        """
        if node.parent_id == ROOT_ID:
            parent: RootNode | UiNode | None = self.root
        else:
            parent = self._nodes.get(node.parent_id)
        if parent is None:
            raise TreeIndexError.orphaned_node(node.id, node.parent_id)
        self._nodes[node.id] = node
        parent.add_child(node.id)

    def ancestors(self, node_id: str) -> list[UiNode]:
        """Ancestors of ``node_id``, nearest first, excluding the root."""
        chain: list[UiNode] = []
        node = self._nodes.get(node_id)
        while node is not None and node.parent_id != ROOT_ID:
            node = self._nodes.get(node.parent_id)
            if node is not None:
                chain.append(node)
        return chain

    def descendants(self, node_id: str) -> Iterator[UiNode]:
        """Attached descendants of ``node_id`` in depth-first order."""
        for child in self.children_of(node_id):
            yield child
            yield from self.descendants(child.id)

    def sort_files(self) -> None:
        files = sorted(self.files(), key=lambda f: (f.filepath, f.project_name or ""))
        self.root.children = {f.id: None for f in files}

    def remove(self, node_id: str) -> None:
        """Drop a node and its whole attached subtree, detaching it from its parent."""
        node = self._nodes.get(node_id)
        if node is None:
            return
        for child in list(self.descendants(node_id)):
            del self._nodes[child.id]
        del self._nodes[node_id]
        parent = self.root if node.parent_id == ROOT_ID else self._nodes.get(node.parent_id)
        if parent is not None:
            parent.children.pop(node_id, None)

    def clear(self) -> None:
        self._nodes.clear()
        self.root = RootNode()
