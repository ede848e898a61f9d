"""Explorer engine: the live index behind a test-run explorer.

One ExplorerEngine owns the node index, pending updates, expand state,
filter state and the derived rows/summary. The rendering layer reads
``rows`` and ``summary`` and drives the engine through its commands; the
transport layer feeds it through the ``on_*`` event handlers.

Usage::

    engine = ExplorerEngine(config)
    engine.on_collected(files)
    engine.start_run()
    engine.on_task_update(entries)   # many times, coalesced
    engine.on_finished(files, errors)
    for node in engine.rows:
        render(node)
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Iterable, Sequence
from functools import partial
from typing import Any

import structlog

from runview.client.models import (
    RawFile,
    TaskAnnotation,
    TaskError,
    UserConsoleLog,
    iter_tasks,
)
from runview.client.state import RawState, TaskUpdate
from runview.client.transport import NullTransport, Transport
from runview.config.models import RunviewConfig
from runview.config.preferences import PreferenceStore
from runview.core.logging import clear_run_id, set_run_id
from runview.explorer.expand import ExpandState
from runview.explorer.filtering import FilterEngine, FilterState
from runview.explorer.index import NodeIndex
from runview.explorer.logs import LogBuffers
from runview.explorer.nodes import UiNode
from runview.explorer.reconciler import Reconciler
from runview.explorer.scheduler import SchedulerState, UpdateScheduler
from runview.explorer.summary import Summary, TestCounts, aggregate, collect_tests_total

logger = structlog.get_logger()

_FILTER_FIELDS = ("search", "failed", "success", "skipped", "only_tests", "expand_all")


class ExplorerEngine:
    """Context object for one explorer session."""

    def __init__(
        self,
        config: RunviewConfig | None = None,
        *,
        state: RawState | None = None,
        transport: Transport | None = None,
        preferences: PreferenceStore | None = None,
    ) -> None:
        self.config = config or RunviewConfig()
        self.state = state if state is not None else RawState()
        self.transport: Transport = transport if transport is not None else NullTransport()
        self.preferences = preferences if preferences is not None else PreferenceStore()

        prefs = self.preferences.preferences
        self.filter = FilterState(**{name: getattr(prefs, name) for name in _FILTER_FIELDS})
        self.expand = ExpandState(self.preferences)
        self.index = NodeIndex()
        self.reconciler = Reconciler(
            self.index,
            self.state,
            self.expand,
            default_expanded=self.config.explorer.default_expanded,
        )
        self.reconciler.force_expanded = self.filter.expand_all is True
        self.filter_engine = FilterEngine(self.index, materialize=self.reconciler.materialize)
        self.scheduler = UpdateScheduler(self._drain, self._full_pass, self.config.scheduler)
        self.logs = LogBuffers(self.config.explorer.max_log_entries_per_file)

        self.rows: list[UiNode] = []
        self.summary = Summary()
        self.filtered_summary = Summary()
        self.unhandled_errors: list[TaskError] = []
        self.run_id: str | None = None
        self._commands: set[asyncio.Future[Any]] = set()

    @property
    def running(self) -> bool:
        return self.scheduler.state is SchedulerState.RUNNING

    # ------------------------------------------------------------------
    # Loading and run lifecycle
    # ------------------------------------------------------------------

    def load_files(self, raw_files: Iterable[RawFile], replace_all: bool = False) -> None:
        """Register files in ``state`` and upsert them into the index.

        With ``replace_all`` this is a full rebuild: files not in
        ``raw_files`` are dropped from both and top-level files are
        re-sorted.
        """
        files = list(raw_files)
        rebuild = replace_all or not self.index.root.children
        if replace_all:
            keep = {raw.id for raw in files}
            for raw in self.state.files():
                if raw.id not in keep:
                    self.state.remove_file(raw.id)
            for file_node in self.index.files():
                if file_node.id not in keep:
                    self.index.remove(file_node.id)
                    self.logs.clear_file(file_node.id)
        self.state.collect_files(files)
        for raw in files:
            self.reconciler.upsert_file(raw, deep=True)
        if rebuild:
            self.index.sort_files()
        self._recompute()
        logger.debug("files_loaded", count=len(files), replace_all=replace_all)

    def start_run(self) -> None:
        """Begin a run. Its id is bound to every log record until end_run()."""
        self.run_id = set_run_id()
        self.unhandled_errors = []
        self.scheduler.start_run()
        logger.info("run_started", files=len(self.index.root.children))

    def end_run(self) -> None:
        self.scheduler.end_run()
        logger.info(
            "run_finished",
            files=self.summary.files,
            tests=self.summary.tests,
            failed=self.summary.tests_failed,
            elapsed=self.summary.elapsed,
            drains=self.scheduler.stats.drains,
        )
        if self.run_id is not None:
            clear_run_id()
            self.run_id = None

    def reset(self) -> None:
        """Drop every node and pending update. Preferences are kept."""
        self.scheduler.reset()
        if self.run_id is not None:
            clear_run_id()
            self.run_id = None
        self.index.clear()
        self.logs.clear()
        self.rows = []
        self.summary = Summary()
        self.filtered_summary = Summary()
        self.unhandled_errors = []

    async def aclose(self) -> None:
        """Reset, then wait for the scheduler and in-flight commands."""
        self.reset()
        await self.scheduler.close()
        for command in list(self._commands):
            command.cancel()
        if self._commands:
            await asyncio.gather(*self._commands, return_exceptions=True)

    # ------------------------------------------------------------------
    # Expand / collapse / filter commands
    # ------------------------------------------------------------------

    def expand_node(self, node_id: str) -> None:
        node = self.index.get(node_id)
        if node is None or not node.expandable:
            return
        node.expanded = True
        self.expand.add(node_id)
        self.reconciler.attach_children(node_id)
        self._set_expand_all(None)
        self.filter_nodes()

    def collapse_node(self, node_id: str) -> None:
        node = self.index.get(node_id)
        if node is None or not node.expandable:
            return
        node.expanded = False
        self.expand.discard(node_id)
        for child in self.index.descendants(node_id):
            child.expanded = False
        raw = self.state.get(node_id)
        if raw is not None:
            self.expand.discard_many(task.id for task in iter_tasks(raw))
        self.expand.discard_many(child.id for child in self.index.descendants(node_id))
        self._set_expand_all(None)
        self.filter_nodes()

    def expand_all_nodes(self) -> None:
        for file_node in self.index.files():
            self.reconciler.materialize(file_node.id)
        expandable = [node for node in self.index if node.expandable]
        for node in expandable:
            node.expanded = True
        self.expand.add_many(node.id for node in expandable)
        self._set_expand_all(True)
        self.filter_nodes()

    def collapse_all_nodes(self) -> None:
        for node in self.index:
            node.expanded = False
        self.expand.clear()
        self._set_expand_all(False)
        self.filter_nodes()

    def set_filter(self, **changes: Any) -> list[UiNode]:
        """Update filter fields, persist them and recompute the rows."""
        self.filter = FilterState.model_validate({**self.filter.model_dump(), **changes})
        self.reconciler.force_expanded = self.filter.expand_all is True
        self.preferences.update(**self.filter.model_dump())
        return self.filter_nodes()

    def filter_nodes(self) -> list[UiNode]:
        """Re-run the filter with the current FilterState."""
        self._recompute()
        return self.rows

    def collect_tests_total(self, rows: Iterable[UiNode] | None = None) -> TestCounts:
        """Status counters for a candidate row set (default: current rows)."""
        return collect_tests_total(self.rows if rows is None else rows, self.state)

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def on_paths_collected(self, paths: Sequence[str], project_name: str | None = None) -> None:
        created = self.state.collect_paths(paths, project_name)
        if created:
            self.load_files(created)
        if not self.running:
            self.start_run()

    def on_collected(self, files: Sequence[RawFile]) -> None:
        if self.running:
            self.state.collect_files(files)
            for raw in files:
                self.reconciler.upsert_file(raw, deep=True)
            self.scheduler.on_task_update((raw.id, raw.id) for raw in files)
        else:
            self.load_files(files)

    def on_task_update(self, entries: Iterable[TaskUpdate]) -> None:
        entries = list(entries)
        applied = self.state.update_tasks(entries)
        if len(applied) != len(entries):
            logger.debug("task_update_ignored", count=len(entries) - len(applied))
        items: list[tuple[str, str]] = []
        for task_id in applied:
            file_id = self.state.file_of(task_id)
            if file_id is not None:
                items.append((file_id, task_id))
        self.scheduler.on_task_update(items)

    def on_finished(
        self,
        files: Sequence[RawFile] | None = None,
        unhandled_errors: Sequence[TaskError] | None = None,
    ) -> None:
        if files:
            self.state.collect_files(files)
        self.unhandled_errors = list(unhandled_errors or ())
        if self.unhandled_errors:
            logger.warning("unhandled_errors", count=len(self.unhandled_errors))
        self.end_run()

    def on_user_console_log(self, entry: UserConsoleLog) -> None:
        file_id = self.state.file_of(entry.task_id) if entry.task_id else None
        self.logs.add_log(file_id, entry)

    def on_test_annotate(self, task_id: str, annotation: TaskAnnotation) -> None:
        self.logs.add_annotation(task_id, annotation)

    # ------------------------------------------------------------------
    # Outbound commands
    # ------------------------------------------------------------------

    def rerun(self, filepaths: Sequence[str]) -> None:
        self._fire("rerun", self.transport.rerun(list(filepaths)))

    def rerun_task(self, task_id: str) -> None:
        self._fire("rerun_task", self.transport.rerun_task(task_id))

    def rerun_all(self) -> None:
        self.rerun([f.filepath for f in self.index.files()])

    def rerun_failed(self) -> None:
        failed = [f.filepath for f in self.index.files() if f.state == "fail"]
        if failed:
            self.rerun(failed)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _drain(self, batch: dict[str, set[str]]) -> None:
        self.reconciler.reconcile_pending(batch)
        self._recompute()
        logger.debug(
            "drain_completed",
            files=len(batch),
            tasks=sum(len(ids) for ids in batch.values()),
            rows=len(self.rows),
        )

    def _full_pass(self) -> None:
        self.reconciler.reconcile_all()
        self._recompute()
        logger.debug("full_pass_completed", nodes=len(self.index), rows=len(self.rows))

    def _recompute(self) -> None:
        self.rows = self.filter_engine.compute_visible(self.filter)
        self.summary = aggregate(self.index, self.state)
        if self.filter.is_active or self.filter.only_tests:
            self.filtered_summary = aggregate(self.index, self.state, self.rows)
        else:
            self.filtered_summary = self.summary

    def _set_expand_all(self, value: bool | None) -> None:
        if self.filter.expand_all == value:
            return
        self.filter.expand_all = value
        self.reconciler.force_expanded = value is True
        self.preferences.update(expand_all=value)

    def _fire(self, command: str, result: Any) -> None:
        if not inspect.isawaitable(result):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(result):
                result.close()
            logger.warning("runner_command_dropped", command=command, reason="no_event_loop")
            return
        future = asyncio.ensure_future(result, loop=loop)
        self._commands.add(future)
        future.add_done_callback(partial(self._command_done, command))

    def _command_done(self, command: str, future: asyncio.Future[Any]) -> None:
        self._commands.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.warning("runner_command_failed", command=command, error=str(error))
