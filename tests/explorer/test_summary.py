"""Tests for summary aggregation."""

from __future__ import annotations

import pytest

from runview.client.models import TaskResult
from runview.client.state import RawState
from runview.explorer.expand import ExpandState
from runview.explorer.filtering import FilterEngine, FilterState
from runview.explorer.index import NodeIndex
from runview.explorer.reconciler import Reconciler
from runview.explorer.summary import (
    Summary,
    aggregate,
    classify,
    collect_tests_total,
    format_elapsed,
)


def _build(files, *, expanded: bool = True) -> tuple[RawState, NodeIndex, FilterEngine]:
    state = RawState()
    state.collect_files(files)
    index = NodeIndex()
    reconciler = Reconciler(index, state, ExpandState(), default_expanded=expanded)
    reconciler.reconcile_all()
    return state, index, FilterEngine(index, materialize=reconciler.materialize)


def _assert_consistent(summary: Summary) -> None:
    assert summary.files == (
        summary.files_failed + summary.files_success + summary.files_ignore + summary.files_running
    )
    assert summary.tests == (
        summary.tests_failed + summary.tests_success + summary.tests_ignore + summary.tests_running
    )


class TestClassify:
    """Outcome classification."""

    @pytest.mark.parametrize(
        ("mode", "state", "expected"),
        [
            ("run", "fail", "fail"),
            ("run", "pass", "pass"),
            ("skip", None, "skip"),
            ("run", "skip", "skip"),
            ("todo", None, "todo"),
            ("run", None, "running"),
            ("run", "run", "running"),
            ("run", "queued", "running"),
        ],
    )
    def test_outcomes(self, mode: str, state: str | None, expected: str) -> None:
        result = TaskResult(state=state) if state else None
        assert classify(mode, result) == expected


class TestFormatElapsed:
    @pytest.mark.parametrize(
        ("ms", "expected"),
        [(0, "0ms"), (850.4, "850ms"), (1000, "1000ms"), (1250, "1.25s")],
    )
    def test_format(self, ms: float, expected: str) -> None:
        assert format_elapsed(ms) == expected


class TestAggregate:
    """aggregate() over whole runs and filtered rows."""

    def test_two_tests_one_failing(self, raw) -> None:
        state, index, _ = _build(
            [raw.file("f", [raw.test("a", "pass"), raw.test("b", "fail")], "fail")]
        )

        summary = aggregate(index, state)

        assert summary.tests_failed == 1
        assert summary.tests_success == 1
        assert summary.files_failed == 1
        _assert_consistent(summary)

    def test_missing_results_count_as_running(self, raw) -> None:
        state, index, _ = _build([raw.file("f", [raw.test("a"), raw.test("b", "pass")])])

        summary = aggregate(index, state)

        assert summary.tests_running == 1
        assert summary.files_running == 1
        assert summary.tests_failed == 0
        _assert_consistent(summary)

    def test_counts_tests_under_collapsed_nodes(self, raw) -> None:
        """Unattached tests still count towards the dashboard."""
        state, index, _ = _build(
            [
                raw.file(
                    "f", [raw.suite("s", [raw.test("a", "pass"), raw.test("b", "skip")])], "pass"
                )
            ],
            expanded=False,
        )

        summary = aggregate(index, state)

        assert summary.tests == 2
        assert summary.tests_skipped == 1
        assert summary.files_success == 1

    def test_time_sums_file_phases_floored_at_zero(self, raw) -> None:
        file_a = raw.file("a", [], "pass", duration=100)
        file_a.collect_duration = 10
        file_a.setup_duration = -5
        file_a.environment_load = 20
        file_b = raw.file("b", [], "pass", duration=900)
        file_b.prepare_duration = 250
        state, index, _ = _build([file_a, file_b])

        summary = aggregate(index, state)

        assert summary.time == pytest.approx(1280)
        assert summary.elapsed == "1.28s"

    def test_failed_snapshot_flag(self, raw) -> None:
        state, index, _ = _build(
            [
                raw.file(
                    "f",
                    [raw.test("a", "fail", errors=["Snapshot `a 1` mismatched"])],
                    "fail",
                )
            ]
        )

        summary = aggregate(index, state)

        assert summary.failed_snapshot
        assert summary.files_snapshot_failed == 1

    def test_passing_snapshot_message_ignored(self, raw) -> None:
        state, index, _ = _build(
            [raw.file("f", [raw.test("a", "pass", errors=["Snapshot x mismatched"])], "pass")]
        )

        assert not aggregate(index, state).failed_snapshot

    def test_filtered_rows_count_only_visible_tests(self, raw) -> None:
        state, index, engine = _build(
            [
                raw.file("f", [raw.test("a", "pass"), raw.test("b", "fail")], "fail"),
                raw.file("g", [raw.test("c", "pass")], "pass"),
            ]
        )
        rows = engine.compute_visible(FilterState(failed=True))

        summary = aggregate(index, state, rows)

        assert summary.tests == 1
        assert summary.tests_failed == 1
        assert summary.files == 1
        _assert_consistent(summary)

    def test_to_dict_includes_totals(self, raw) -> None:
        state, index, _ = _build([raw.file("f", [raw.test("a", "pass")], "pass")])

        data = aggregate(index, state).to_dict()

        assert data["tests"] == 1
        assert data["files"] == 1
        assert data["tests_success"] == 1
        assert "elapsed" in data


class TestCollectTestsTotal:
    """Badge counters for candidate row sets."""

    def test_containers_count_all_tests_below(self, raw) -> None:
        state, index, _ = _build(
            [
                raw.file(
                    "f",
                    [raw.suite("s", [raw.test("a", "pass"), raw.test("b", "fail")]), raw.test("c")],
                )
            ],
            expanded=False,
        )

        counts = collect_tests_total(index.files(), state)

        assert (counts.success, counts.failed, counts.running) == (1, 1, 1)
        assert counts.total == 3

    def test_tests_counted_once(self, raw) -> None:
        state, index, _ = _build([raw.file("f", [raw.test("a", "pass")])])

        counts = collect_tests_total([index.get("f"), index.get("a")], state)

        assert counts.total == 1
