"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
For configurable values, see models.py (SchedulerConfig, ExplorerConfig, etc.).
"""

import re

# =============================================================================
# Tree Index
# =============================================================================

ROOT_ID = "root"
"""Id of the permanent root sentinel. Parent id of every file node."""

UNKNOWN_FILE_KEY = "unknown"
"""Log buffer key for console output that cannot be attributed to a file."""

PROJECT_NAME_COLORS: tuple[str, ...] = ("yellow", "cyan", "green", "magenta")
"""Palette project names are hashed into."""

# =============================================================================
# Summary
# =============================================================================

SNAPSHOT_MISMATCH_PATTERN = re.compile(r"Snapshot .* mismatched")
"""Error message signature of a failed snapshot assertion."""

# =============================================================================
# Workspace Layout
# =============================================================================

WORKSPACE_DIR_NAME = ".runview"
CONFIG_FILE_NAME = "config.yaml"
PREFERENCES_FILE_NAME = "preferences.yaml"
