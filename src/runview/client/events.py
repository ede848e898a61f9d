"""Runner event envelopes and dispatch.

Each event is a JSON object with an ``event`` discriminator, e.g.::

    {"event": "onCollected", "files": [...]}
    {"event": "onTaskUpdate", "packs": [["id", {"state": "pass"}, {}]]}
    {"event": "onFinished", "files": [...], "errors": [...]}

Recordings are stored one event per line (JSONL). Decoding happens once,
here; the explorer only ever sees typed models.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from runview.client.models import (
    RawFile,
    TaskAnnotation,
    TaskError,
    TaskResult,
    UserConsoleLog,
)
from runview.core.errors import EventError

if TYPE_CHECKING:
    from runview.explorer.engine import ExplorerEngine


class _Event(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PathsCollected(_Event):
    event: Literal["onPathsCollected"]
    paths: list[str]
    project_name: str | None = Field(default=None, alias="projectName")


class Collected(_Event):
    event: Literal["onCollected"]
    files: list[RawFile] = Field(default_factory=list)


class TaskUpdated(_Event):
    event: Literal["onTaskUpdate"]
    packs: list[tuple[str, TaskResult | None, dict[str, Any] | None]] = Field(default_factory=list)


class Finished(_Event):
    event: Literal["onFinished"]
    files: list[RawFile] = Field(default_factory=list)
    errors: list[TaskError] = Field(default_factory=list)


class ConsoleLogged(_Event):
    event: Literal["onUserConsoleLog"]
    log: UserConsoleLog


class AnnotationAdded(_Event):
    event: Literal["onTestAnnotate"]
    task_id: str = Field(alias="taskId")
    annotation: TaskAnnotation


RunnerEvent = Annotated[
    Union[PathsCollected, Collected, TaskUpdated, Finished, ConsoleLogged, AnnotationAdded],
    Field(discriminator="event"),
]

EVENT_NAMES = frozenset(
    {
        "onPathsCollected",
        "onCollected",
        "onTaskUpdate",
        "onFinished",
        "onUserConsoleLog",
        "onTestAnnotate",
    }
)

_ADAPTER: TypeAdapter[RunnerEvent] = TypeAdapter(RunnerEvent)


def decode_event(data: str | dict[str, Any], line: int | None = None) -> RunnerEvent:
    """Decode one event from a JSON string or an already-parsed mapping.

    Raises:
        EventError: malformed JSON, unknown event name or invalid payload.
    """
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise EventError.decode_failed(str(e), line) from e
    if not isinstance(data, dict):
        raise EventError.decode_failed("event must be a JSON object", line)

    name = data.get("event")
    if name not in EVENT_NAMES:
        raise EventError.unknown_event(str(name))
    try:
        return _ADAPTER.validate_python(data)
    except ValidationError as e:
        err = e.errors()[0]
        where = ".".join(str(loc) for loc in err["loc"])
        raise EventError.decode_failed(f"{where}: {err['msg']}", line) from e


def read_events(path: Path) -> Iterator[RunnerEvent]:
    """Yield events from a JSONL recording, skipping blank lines."""
    with path.open(encoding="utf-8") as f:
        for lineno, text in enumerate(f, start=1):
            if text.strip():
                yield decode_event(text, line=lineno)


def dispatch(engine: ExplorerEngine, event: RunnerEvent) -> None:
    """Route a decoded event to the matching engine handler."""
    if isinstance(event, PathsCollected):
        engine.on_paths_collected(event.paths, event.project_name)
    elif isinstance(event, Collected):
        engine.on_collected(event.files)
    elif isinstance(event, TaskUpdated):
        engine.on_task_update(event.packs)
    elif isinstance(event, Finished):
        engine.on_finished(event.files, event.errors)
    elif isinstance(event, ConsoleLogged):
        engine.on_user_console_log(event.log)
    elif isinstance(event, AnnotationAdded):
        engine.on_test_annotate(event.task_id, event.annotation)
