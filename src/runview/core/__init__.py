"""Core module exports."""

from runview.core.errors import (
    ConfigError,
    ErrorCode,
    EventError,
    InternalError,
    RunviewError,
    TransportError,
    TreeIndexError,
)
from runview.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    run_context,
    set_run_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "EventError",
    "InternalError",
    "RunviewError",
    "TransportError",
    "TreeIndexError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "run_context",
    "set_run_id",
]
