"""Tests for config constants."""

from runview.config.constants import ROOT_ID, SNAPSHOT_MISMATCH_PATTERN, UNKNOWN_FILE_KEY


def test_root_and_unknown_keys_are_distinct() -> None:
    assert ROOT_ID != UNKNOWN_FILE_KEY


def test_snapshot_pattern_matches_runner_message() -> None:
    assert SNAPSHOT_MISMATCH_PATTERN.search("Snapshot `renders > 1` mismatched")
    assert not SNAPSHOT_MISMATCH_PATTERN.search("expected 1 to be 2")
