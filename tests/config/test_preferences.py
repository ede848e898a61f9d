"""Tests for persisted explorer preferences."""

from pathlib import Path

import yaml

from runview.config.preferences import PREFERENCES_HEADER, PreferenceStore, UiPreferences


class TestPreferenceStore:
    """PreferenceStore read/write tests."""

    def test_memory_only_store_uses_defaults(self) -> None:
        store = PreferenceStore()

        assert store.preferences == UiPreferences()
        store.update(search="foo")
        assert store.preferences.search == "foo"

    def test_update_writes_through(self, tmp_path: Path) -> None:
        """Updates land on disk with the generated header."""
        path = tmp_path / ".runview" / "preferences.yaml"
        store = PreferenceStore(path)

        store.update(expanded=["f1", "s1"], failed=True)

        text = path.read_text()
        assert text.startswith(PREFERENCES_HEADER)
        data = yaml.safe_load(text)
        assert data["expanded"] == ["f1", "s1"]
        assert data["failed"] is True

    def test_round_trip_through_new_store(self, tmp_path: Path) -> None:
        path = tmp_path / "preferences.yaml"
        PreferenceStore(path).update(only_tests=True, expand_all=False)

        reloaded = PreferenceStore(path).preferences

        assert reloaded.only_tests is True
        assert reloaded.expand_all is False

    def test_unknown_keys_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "preferences.yaml"
        path.write_text("search: abc\nsome_future_key: 1\n")

        assert PreferenceStore(path).preferences.search == "abc"

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "preferences.yaml"
        path.write_text("expanded: [unclosed\n")

        assert PreferenceStore(path).preferences == UiPreferences()

    def test_wrong_shape_falls_back_to_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "preferences.yaml"
        path.write_text("- just\n- a list\n")

        assert PreferenceStore(path).preferences == UiPreferences()
