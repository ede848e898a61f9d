"""Authoritative run state as received from the test runner.

RawState is the transport side of the explorer: it owns the decoded task
trees and the id lookups the explorer reads from. The explorer never
mutates it; event handlers apply runner payloads here first, then notify
the explorer of what changed.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

import structlog

from runview.client.models import (
    RawFile,
    RawTask,
    TaskResult,
    children_of,
    file_id_for,
    iter_tasks,
)

logger = structlog.get_logger()

TaskUpdate = tuple[str, TaskResult | None, dict[str, Any] | None]
"""One entry of a task update pack: ``(task_id, result, meta)``."""


class RawState:
    """File-scoped result trees with ``id -> task`` and ``id -> parent`` lookups."""

    def __init__(self) -> None:
        self._files: dict[str, RawFile] = {}
        self._tasks: dict[str, RawTask] = {}
        self._parents: dict[str, str] = {}
        self._file_of: dict[str, str] = {}

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def files(self) -> list[RawFile]:
        return list(self._files.values())

    def get(self, task_id: str) -> RawTask | None:
        return self._tasks.get(task_id)

    def get_file(self, file_id: str) -> RawFile | None:
        return self._files.get(file_id)

    def parent_of(self, task_id: str) -> str | None:
        return self._parents.get(task_id)

    def file_of(self, task_id: str) -> str | None:
        return self._file_of.get(task_id)

    def ancestors(self, task_id: str) -> list[str]:
        """Ancestor ids of ``task_id``, nearest first, ending at its file."""
        chain: list[str] = []
        parent = self._parents.get(task_id)
        while parent is not None:
            chain.append(parent)
            parent = self._parents.get(parent)
        return chain

    def collect_paths(self, paths: Iterable[str], project_name: str | None = None) -> list[RawFile]:
        """Register placeholder files for collected paths not yet known."""
        created: list[RawFile] = []
        for path in paths:
            file_id = file_id_for(path, project_name)
            if file_id in self._files:
                continue
            raw = RawFile(
                id=file_id,
                name=path,
                filepath=path,
                project_name=project_name,
            )
            self._index_file(raw)
            created.append(raw)
        return created

    def collect_files(self, files: Iterable[RawFile]) -> None:
        """Add files, replacing any previous tree with the same id."""
        for raw in files:
            previous = self._files.get(raw.id)
            if previous is not None:
                self._forget(previous)
            self._index_file(raw)

    def remove_file(self, file_id: str) -> None:
        raw = self._files.get(file_id)
        if raw is not None:
            self._forget(raw)

    def update_tasks(self, entries: Iterable[TaskUpdate]) -> list[str]:
        """Apply result/meta updates. Returns the ids that were known."""
        applied: list[str] = []
        for task_id, result, meta in entries:
            task = self._tasks.get(task_id)
            if task is None:
                logger.debug("raw_update_unknown_task", task_id=task_id)
                continue
            task.result = result
            if meta:
                task.meta = {**task.meta, **meta}
            applied.append(task_id)
        return applied

    def iter_all(self) -> Iterator[RawTask]:
        for raw in self._files.values():
            yield from iter_tasks(raw)

    def clear(self) -> None:
        self._files.clear()
        self._tasks.clear()
        self._parents.clear()
        self._file_of.clear()

    def _index_file(self, raw: RawFile) -> None:
        self._files[raw.id] = raw
        self._tasks[raw.id] = raw
        self._file_of[raw.id] = raw.id
        self._index_children(raw, raw.id)

    def _index_children(self, task: RawTask, file_id: str) -> None:
        for child in children_of(task):
            self._tasks[child.id] = child
            self._parents[child.id] = task.id
            self._file_of[child.id] = file_id
            self._index_children(child, file_id)

    def _forget(self, raw: RawFile) -> None:
        for task in iter_tasks(raw):
            self._tasks.pop(task.id, None)
            self._parents.pop(task.id, None)
            self._file_of.pop(task.id, None)
        self._files.pop(raw.id, None)
