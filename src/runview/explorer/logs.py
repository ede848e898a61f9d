"""Per-file console log and per-task annotation buffers."""

from __future__ import annotations

from collections import deque

from runview.client.models import TaskAnnotation, UserConsoleLog
from runview.config.constants import UNKNOWN_FILE_KEY


class LogBuffers:
    """Bounded console output per file, plus annotations per task."""

    def __init__(self, max_entries_per_file: int = 500) -> None:
        self.max_entries_per_file = max_entries_per_file
        self._logs: dict[str, deque[UserConsoleLog]] = {}
        self._annotations: dict[str, list[TaskAnnotation]] = {}

    def add_log(self, file_id: str | None, entry: UserConsoleLog) -> None:
        key = file_id or UNKNOWN_FILE_KEY
        buffer = self._logs.get(key)
        if buffer is None:
            buffer = self._logs[key] = deque(maxlen=self.max_entries_per_file)
        buffer.append(entry)

    def logs_for(self, file_id: str) -> list[UserConsoleLog]:
        return list(self._logs.get(file_id, ()))

    def add_annotation(self, task_id: str, annotation: TaskAnnotation) -> None:
        self._annotations.setdefault(task_id, []).append(annotation)

    def annotations_for(self, task_id: str) -> list[TaskAnnotation]:
        return list(self._annotations.get(task_id, ()))

    def clear_file(self, file_id: str) -> None:
        self._logs.pop(file_id, None)

    def clear(self) -> None:
        self._logs.clear()
        self._annotations.clear()
