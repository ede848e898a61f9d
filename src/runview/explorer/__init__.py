"""Explorer core: node index, reconciliation, filtering, scheduling, summary."""

from runview.explorer.engine import ExplorerEngine
from runview.explorer.expand import ExpandState
from runview.explorer.filtering import FilterEngine, FilterState, matches
from runview.explorer.index import NodeIndex
from runview.explorer.nodes import FileNode, RootNode, SuiteNode, TestNode, UiNode
from runview.explorer.reconciler import Reconciler
from runview.explorer.scheduler import PendingSet, SchedulerState, UpdateScheduler
from runview.explorer.summary import Summary, TestCounts, aggregate, collect_tests_total

__all__ = [
    "ExplorerEngine",
    "ExpandState",
    "FilterEngine",
    "FilterState",
    "matches",
    "NodeIndex",
    "FileNode",
    "RootNode",
    "SuiteNode",
    "TestNode",
    "UiNode",
    "Reconciler",
    "PendingSet",
    "SchedulerState",
    "UpdateScheduler",
    "Summary",
    "TestCounts",
    "aggregate",
    "collect_tests_total",
]
