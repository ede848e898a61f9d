"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (RUNVIEW__SECTION__KEY)
3. Workspace YAML (.runview/config.yaml)
4. Global YAML (~/.config/runview/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    RUNVIEW__<SECTION>__<KEY>=<VALUE>

Examples:
    RUNVIEW__LOGGING__LEVEL=DEBUG
    RUNVIEW__SCHEDULER__MAX_FPS=5
    RUNVIEW__TRANSPORT__BASE_URL=http://127.0.0.1:51204
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        RUNVIEW__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every drain and may be noisy on large runs.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class SchedulerConfig(BaseModel):
    """Update scheduler configuration.

    Env vars:
        RUNVIEW__SCHEDULER__MAX_FPS: Maximum recomputation passes per second
        RUNVIEW__SCHEDULER__FALLBACK_TIMEOUT_SEC: Grace period before a full pass
    """

    max_fps: float = Field(
        default=10.0,
        description="Maximum drains per second while a run is in progress. "
        "TRADEOFF: Higher values reduce latency but cost more CPU on large trees.",
    )
    fallback_timeout_sec: float = Field(
        default=0.5,
        description="Grace period after a run starts before a full reconciliation is "
        "forced, for runners that never send incremental updates.",
    )

    @field_validator("max_fps")
    @classmethod
    def validate_max_fps(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"max_fps must be positive, got {v}")
        return v

    @field_validator("fallback_timeout_sec")
    @classmethod
    def validate_fallback(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"fallback_timeout_sec must be >= 0, got {v}")
        return v


class ExplorerConfig(BaseModel):
    """Explorer tree configuration.

    Env vars:
        RUNVIEW__EXPLORER__DEFAULT_EXPANDED: Expand newly seen files/suites
        RUNVIEW__EXPLORER__MAX_LOG_ENTRIES_PER_FILE: Console log buffer size
    """

    default_expanded: bool = Field(
        default=False,
        description="Expand files and suites the first time they are seen. "
        "RISK: Large suites attach every test eagerly when enabled.",
    )
    max_log_entries_per_file: int = Field(
        default=500,
        description="Console log entries kept per file. Oldest entries are dropped.",
    )

    @field_validator("max_log_entries_per_file")
    @classmethod
    def validate_max_logs(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_log_entries_per_file must be >= 1, got {v}")
        return v


class TransportConfig(BaseModel):
    """Runner transport configuration.

    Env vars:
        RUNVIEW__TRANSPORT__BASE_URL: Runner API base URL
        RUNVIEW__TRANSPORT__TIMEOUT_SEC: Request timeout
    """

    base_url: str = Field(
        default="http://127.0.0.1:51204",
        description="Base URL of the test runner's command API.",
    )
    timeout_sec: float = Field(
        default=5.0,
        description="Timeout for rerun requests.",
    )


class RunviewConfig(BaseModel):
    """Root configuration for runview.

    All settings can be configured via:
    1. Environment variables: RUNVIEW__SECTION__KEY
    2. YAML config files (workspace or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    explorer: ExplorerConfig = Field(default_factory=ExplorerConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
