"""Transport-side collaborators: raw task models, run state, events, commands."""

from runview.client.events import RunnerEvent, decode_event, dispatch, read_events
from runview.client.models import (
    RawFile,
    RawSuite,
    RawTask,
    RawTest,
    TaskAnnotation,
    TaskError,
    TaskResult,
    UserConsoleLog,
    file_id_for,
)
from runview.client.state import RawState
from runview.client.transport import HttpTransport, NullTransport, Transport

__all__ = [
    "RunnerEvent",
    "decode_event",
    "dispatch",
    "read_events",
    "RawFile",
    "RawSuite",
    "RawTask",
    "RawTest",
    "TaskAnnotation",
    "TaskError",
    "TaskResult",
    "UserConsoleLog",
    "file_id_for",
    "RawState",
    "HttpTransport",
    "NullTransport",
    "Transport",
]
