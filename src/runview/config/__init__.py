"""Config module exports."""

from runview.config.loader import RunviewSettings, load_config
from runview.config.models import (
    ExplorerConfig,
    LoggingConfig,
    RunviewConfig,
    SchedulerConfig,
    TransportConfig,
)
from runview.config.preferences import PreferenceStore, UiPreferences

__all__ = [
    "load_config",
    "RunviewConfig",
    "RunviewSettings",
    "ExplorerConfig",
    "LoggingConfig",
    "SchedulerConfig",
    "TransportConfig",
    "PreferenceStore",
    "UiPreferences",
]
