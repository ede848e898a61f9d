"""Raw task models as reported by the test runner.

A run is reported as a forest of files, each holding an ordered tree of
suites and tests. Payloads arrive as JSON with camelCase keys; they are
decoded once, here, into a tagged union discriminated on ``type``.
Unknown fields are ignored so newer runners stay compatible.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

TaskMode = Literal["run", "skip", "todo", "only"]
TaskState = Literal["pass", "fail", "skip", "todo", "run", "queued"]
TaskType = Literal["file", "suite", "test"]


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TaskError(_WireModel):
    """A single error attached to a task result."""

    message: str = ""
    name: str | None = None
    stack: str | None = None


class TaskResult(_WireModel):
    """Outcome of a task. ``state=None`` means the task is still running."""

    state: TaskState | None = None
    duration: float | None = None
    errors: list[TaskError] = Field(default_factory=list)


class _RawTaskBase(_WireModel):
    id: str
    name: str
    mode: TaskMode = "run"
    result: TaskResult | None = None
    meta: dict[str, Any] = Field(default_factory=dict)


class RawTest(_RawTaskBase):
    type: Literal["test"] = "test"


class RawSuite(_RawTaskBase):
    type: Literal["suite"] = "suite"
    tasks: list[RawChild] = Field(default_factory=list)


class RawFile(_RawTaskBase):
    type: Literal["file"] = "file"
    filepath: str
    project_name: str | None = Field(default=None, alias="projectName")
    collect_duration: float | None = Field(default=None, alias="collectDuration")
    setup_duration: float | None = Field(default=None, alias="setupDuration")
    environment_load: float | None = Field(default=None, alias="environmentLoad")
    prepare_duration: float | None = Field(default=None, alias="prepareDuration")
    tasks: list[RawChild] = Field(default_factory=list)


RawChild = Annotated[Union[RawSuite, RawTest], Field(discriminator="type")]
RawTask = Union[RawFile, RawSuite, RawTest]

RawSuite.model_rebuild()
RawFile.model_rebuild()


class UserConsoleLog(_WireModel):
    """Console output captured while a task was running."""

    content: str
    type: Literal["stdout", "stderr"] = "stdout"
    task_id: str | None = Field(default=None, alias="taskId")
    time: float = 0.0
    size: int = 0


class TaskAnnotation(_WireModel):
    """A user-supplied annotation attached to a test."""

    message: str
    type: str = "notice"
    location: dict[str, Any] | None = None


def file_id_for(filepath: str, project_name: str | None = None) -> str:
    """Stable file id derived from its path and owning project."""
    digest = hashlib.sha1(f"{filepath}{project_name or ''}".encode()).hexdigest()
    return digest[:10]


def is_container(task: RawTask) -> bool:
    return task.type in ("file", "suite")


def children_of(task: RawTask) -> list[RawSuite | RawTest]:
    if isinstance(task, (RawFile, RawSuite)):
        return task.tasks
    return []


def iter_tasks(task: RawTask) -> Iterator[RawTask]:
    """Depth-first walk of ``task`` and all of its descendants."""
    yield task
    for child in children_of(task):
        yield from iter_tasks(child)


def iter_tests(task: RawTask) -> Iterator[RawTest]:
    for item in iter_tasks(task):
        if isinstance(item, RawTest):
            yield item
