"""runview error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Tree index
- 6xxx: Events
- 7xxx: Transport
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # Tree index (3xxx)
    INDEX_MISSING_REFERENCE = 3001
    INDEX_ORPHANED_NODE = 3002

    # Events (6xxx)
    EVENT_DECODE_ERROR = 6001
    EVENT_UNKNOWN = 6002

    # Transport (7xxx)
    TRANSPORT_REQUEST_FAILED = 7001

    # Internal (9xxx)
    INTERNAL_ERROR = 9001
    INTERNAL_TIMEOUT = 9002


@dataclass(frozen=True, slots=True)
class RunviewError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(RunviewError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class TreeIndexError(RunviewError):
    """Node index consistency errors.

    Never surfaced to users: the reconciler catches these, logs them and
    leaves the affected node stale until the next full reconciliation.
    """

    @classmethod
    def missing_reference(cls, task_id: str) -> "TreeIndexError":
        return cls(
            code=ErrorCode.INDEX_MISSING_REFERENCE,
            message=f"Unknown task id: {task_id}",
            retryable=True,
            details={"task_id": task_id},
        )

    @classmethod
    def orphaned_node(cls, node_id: str, parent_id: str) -> "TreeIndexError":
        return cls(
            code=ErrorCode.INDEX_ORPHANED_NODE,
            message=f"Parent {parent_id} of node {node_id} is not indexed",
            retryable=True,
            details={"node_id": node_id, "parent_id": parent_id},
        )


class EventError(RunviewError):
    """Errors decoding inbound runner events."""

    @classmethod
    def decode_failed(cls, reason: str, line: int | None = None) -> "EventError":
        where = f" (line {line})" if line is not None else ""
        return cls(
            code=ErrorCode.EVENT_DECODE_ERROR,
            message=f"Failed to decode event{where}: {reason}",
            details={"reason": reason, "line": line},
        )

    @classmethod
    def unknown_event(cls, name: str) -> "EventError":
        return cls(
            code=ErrorCode.EVENT_UNKNOWN,
            message=f"Unknown event: {name}",
            details={"event": name},
        )


class TransportError(RunviewError):
    """Errors talking to the test runner."""

    @classmethod
    def request_failed(cls, command: str, reason: str) -> "TransportError":
        return cls(
            code=ErrorCode.TRANSPORT_REQUEST_FAILED,
            message=f"Runner request '{command}' failed: {reason}",
            retryable=True,
            details={"command": command, "reason": reason},
        )


class InternalError(RunviewError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
