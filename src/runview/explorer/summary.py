"""Run summary counters.

Counts are read from raw state rather than from attached nodes, so tests
under collapsed (never attached) suites are still counted. A task without
a result is counted as running, never as failed or passed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any, Literal

from runview.client.models import RawFile, RawTask, RawTest, TaskMode, TaskResult, iter_tests
from runview.client.state import RawState
from runview.config.constants import SNAPSHOT_MISMATCH_PATTERN
from runview.explorer.index import NodeIndex
from runview.explorer.nodes import FileNode, TestNode, UiNode

Outcome = Literal["fail", "pass", "skip", "todo", "running"]


def classify(mode: TaskMode, result: TaskResult | None) -> Outcome:
    state = result.state if result is not None else None
    if state == "fail":
        return "fail"
    if state == "pass":
        return "pass"
    if mode == "todo" or state == "todo":
        return "todo"
    if mode == "skip" or state == "skip":
        return "skip"
    return "running"


def has_failed_snapshot(task: RawTask) -> bool:
    if task.result is None or task.result.state != "fail":
        return False
    return any(SNAPSHOT_MISMATCH_PATTERN.search(e.message) for e in task.result.errors)


def format_elapsed(ms: float) -> str:
    """Human readable elapsed time: ``850ms`` or ``1.25s``."""
    if ms > 1000:
        return f"{ms / 1000:.2f}s"
    return f"{round(ms)}ms"


@dataclass
class TestCounts:
    """Test outcome counters."""

    __test__ = False

    failed: int = 0
    success: int = 0
    skipped: int = 0
    todo: int = 0
    running: int = 0

    @property
    def ignore(self) -> int:
        return self.skipped + self.todo

    @property
    def total(self) -> int:
        return self.failed + self.success + self.ignore + self.running

    def add(self, outcome: Outcome) -> None:
        if outcome == "fail":
            self.failed += 1
        elif outcome == "pass":
            self.success += 1
        elif outcome == "skip":
            self.skipped += 1
        elif outcome == "todo":
            self.todo += 1
        else:
            self.running += 1


@dataclass
class Summary:
    """Dashboard counters for a set of files and tests."""

    files_failed: int = 0
    files_success: int = 0
    files_skipped: int = 0
    files_todo: int = 0
    files_running: int = 0
    files_snapshot_failed: int = 0
    tests_failed: int = 0
    tests_success: int = 0
    tests_skipped: int = 0
    tests_todo: int = 0
    tests_running: int = 0
    time: float = 0.0
    failed_snapshot: bool = False

    @property
    def files_ignore(self) -> int:
        return self.files_skipped + self.files_todo

    @property
    def files(self) -> int:
        return self.files_failed + self.files_success + self.files_ignore + self.files_running

    @property
    def tests_ignore(self) -> int:
        return self.tests_skipped + self.tests_todo

    @property
    def tests(self) -> int:
        return self.tests_failed + self.tests_success + self.tests_ignore + self.tests_running

    @property
    def elapsed(self) -> str:
        return format_elapsed(self.time)

    def add_file(self, outcome: Outcome) -> None:
        if outcome == "fail":
            self.files_failed += 1
        elif outcome == "pass":
            self.files_success += 1
        elif outcome == "skip":
            self.files_skipped += 1
        elif outcome == "todo":
            self.files_todo += 1
        else:
            self.files_running += 1

    def add_test(self, outcome: Outcome) -> None:
        if outcome == "fail":
            self.tests_failed += 1
        elif outcome == "pass":
            self.tests_success += 1
        elif outcome == "skip":
            self.tests_skipped += 1
        elif outcome == "todo":
            self.tests_todo += 1
        else:
            self.tests_running += 1

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.update(
            files=self.files,
            files_ignore=self.files_ignore,
            tests=self.tests,
            tests_ignore=self.tests_ignore,
            elapsed=self.elapsed,
        )
        return data


def _file_time(raw: RawFile) -> float:
    parts = (
        raw.collect_duration,
        raw.setup_duration,
        raw.environment_load,
        raw.prepare_duration,
        raw.result.duration if raw.result else None,
    )
    return sum(max(part or 0.0, 0.0) for part in parts)


def _owning_file(index: NodeIndex, node: UiNode) -> FileNode | None:
    if isinstance(node, FileNode):
        return node
    chain = index.ancestors(node.id)
    top = chain[-1] if chain else None
    return top if isinstance(top, FileNode) else None


def aggregate(
    index: NodeIndex,
    state: RawState,
    rows: Iterable[UiNode] | None = None,
) -> Summary:
    """Summarize every indexed file, or only the given filtered rows.

    With ``rows=None`` each file contributes all of its raw tests. With
    rows, only test rows are counted, and files are those listed or owning
    a listed test.
    """
    summary = Summary()

    if rows is None:
        file_nodes: list[FileNode] = index.files()
        test_ids: list[str] | None = None
    else:
        seen: dict[str, FileNode] = {}
        test_ids = []
        for node in rows:
            owner = _owning_file(index, node)
            if owner is not None:
                seen.setdefault(owner.id, owner)
            if isinstance(node, TestNode):
                test_ids.append(node.id)
        file_nodes = list(seen.values())

    for file_node in file_nodes:
        raw_file = state.get_file(file_node.id)
        if raw_file is None:
            summary.add_file(classify(file_node.mode, None))
            continue
        summary.add_file(classify(raw_file.mode, raw_file.result))
        summary.time += _file_time(raw_file)
        file_snapshot_failed = False
        if test_ids is None:
            for test in iter_tests(raw_file):
                summary.add_test(classify(test.mode, test.result))
                file_snapshot_failed = file_snapshot_failed or has_failed_snapshot(test)
        if file_snapshot_failed:
            summary.files_snapshot_failed += 1
            summary.failed_snapshot = True

    for test_id in test_ids or ():
        raw = state.get(test_id)
        if raw is None:
            summary.add_test("running")
            continue
        summary.add_test(classify(raw.mode, raw.result))
        if has_failed_snapshot(raw):
            summary.failed_snapshot = True

    return summary


def collect_tests_total(rows: Iterable[UiNode], state: RawState) -> TestCounts:
    """Count test outcomes under a candidate row set.

    Test rows count themselves; container rows count every raw test below
    them. A test reachable through several rows is counted once.
    """
    counts = TestCounts()
    counted: set[str] = set()
    for node in rows:
        raw = state.get(node.id)
        if raw is None:
            if isinstance(node, TestNode) and node.id not in counted:
                counted.add(node.id)
                counts.add("running")
            continue
        tests = [raw] if isinstance(raw, RawTest) else list(iter_tests(raw))
        for test in tests:
            if test.id not in counted:
                counted.add(test.id)
                counts.add(classify(test.mode, test.result))
    return counts
