"""Filtered projections of the explorer tree.

Given a search string and status toggles, compute the ordered list of rows
to display. Any node that matches pulls its whole ancestor chain into the
output, so a deep match is always reachable through visible suites and
files. Ancestors of a match are always force-opened; expansion flags only
govern the subtrees below matching containers.
"""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from runview.explorer.index import NodeIndex
from runview.explorer.nodes import TestNode, UiNode


class FilterState(BaseModel):
    """Search and status toggles.

    ``expand_all`` is tri-state: None uses per-node ``expanded`` flags,
    True/False force every container open/closed.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    search: str = ""
    failed: bool = False
    success: bool = False
    skipped: bool = False
    only_tests: bool = False
    expand_all: bool | None = None

    @property
    def has_status(self) -> bool:
        return self.failed or self.success or self.skipped

    @property
    def is_active(self) -> bool:
        return bool(self.search) or self.has_status


def match_search(node: UiNode, search: str) -> bool:
    return not search or search.lower() in node.name.lower()


def match_status(node: UiNode, filter_state: FilterState) -> bool:
    if not filter_state.has_status:
        return True
    if filter_state.failed and node.state == "fail":
        return True
    if filter_state.success and node.state == "pass":
        return True
    return filter_state.skipped and node.mode in ("skip", "todo")


def matches(node: UiNode, filter_state: FilterState) -> bool:
    """Whether ``node`` itself satisfies the filter.

    Status toggles are evaluated on tests and on childless containers (a
    file that failed to collect). Containers with children are shown only
    as ancestors of matching tests when a status toggle is on.
    """
    if not match_search(node, filter_state.search):
        return False
    if filter_state.has_status and node.expandable and node.children:
        return False
    return match_status(node, filter_state)


class FilterEngine:
    """Computes visible rows from a NodeIndex and a FilterState.

    ``materialize`` is called with each file id before matching when a
    predicate is active (or every row is requested), so matches inside
    collapsed subtrees are found.
    """

    def __init__(
        self,
        index: NodeIndex,
        materialize: Callable[[str], None] | None = None,
    ) -> None:
        self.index = index
        self._materialize = materialize
        self.last_matches: set[str] = set()
        self.last_ancestors: set[str] = set()

    def compute_visible(self, filter_state: FilterState) -> list[UiNode]:
        self.last_matches = set()
        self.last_ancestors = set()

        needs_full_tree = (
            filter_state.is_active or filter_state.only_tests or filter_state.expand_all is True
        )
        if needs_full_tree and self._materialize is not None:
            for file_node in self.index.files():
                self._materialize(file_node.id)

        if not filter_state.is_active:
            if filter_state.only_tests:
                return [n for n in self._walk_all() if isinstance(n, TestNode)]
            return self._walk_open(filter_state)

        for node in self._walk_all():
            if matches(node, filter_state):
                self.last_matches.add(node.id)
                self.last_ancestors.update(a.id for a in self.index.ancestors(node.id))

        if filter_state.only_tests:
            return [
                n
                for n in self._walk_all()
                if isinstance(n, TestNode) and n.id in self.last_matches
            ]
        return self._walk_filtered(filter_state)

    def _walk_all(self) -> list[UiNode]:
        out: list[UiNode] = []
        for file_node in self.index.files():
            out.append(file_node)
            out.extend(self.index.descendants(file_node.id))
        return out

    def _is_open(self, node: UiNode, filter_state: FilterState) -> bool:
        if not node.expandable:
            return False
        if filter_state.expand_all is not None:
            return filter_state.expand_all
        return node.expanded

    def _walk_open(self, filter_state: FilterState) -> list[UiNode]:
        out: list[UiNode] = []

        def visit(node: UiNode) -> None:
            out.append(node)
            if self._is_open(node, filter_state):
                for child in self.index.children_of(node.id):
                    visit(child)

        for file_node in self.index.files():
            visit(file_node)
        return out

    def _walk_filtered(self, filter_state: FilterState) -> list[UiNode]:
        out: list[UiNode] = []
        matched = self.last_matches
        ancestors = self.last_ancestors

        def visit(node: UiNode, in_matched_subtree: bool) -> None:
            out.append(node)
            is_open = node.id in ancestors or self._is_open(node, filter_state)
            if not is_open:
                return
            context = in_matched_subtree or node.id in matched
            for child in self.index.children_of(node.id):
                if child.id in matched or child.id in ancestors or context:
                    visit(child, context)

        for file_node in self.index.files():
            if file_node.id in matched or file_node.id in ancestors:
                visit(file_node, False)
        return out
