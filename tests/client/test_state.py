"""Tests for RawState."""

from runview.client.models import TaskResult, file_id_for
from runview.client.state import RawState


class TestCollect:
    """Collecting files and paths."""

    def test_collect_files_indexes_every_task(self, raw) -> None:
        state = RawState()
        state.collect_files([raw.file("f", [raw.suite("s", [raw.test("t")])])])

        assert len(state) == 3
        assert state.parent_of("t") == "s"
        assert state.parent_of("s") == "f"
        assert state.file_of("t") == "f"
        assert state.ancestors("t") == ["s", "f"]

    def test_recollect_forgets_removed_tasks(self, raw) -> None:
        """Replacing a file drops ids that are no longer in its tree."""
        state = RawState()
        state.collect_files([raw.file("f", [raw.test("old")])])

        state.collect_files([raw.file("f", [raw.test("new")])])

        assert "old" not in state
        assert "new" in state
        assert len(state.files()) == 1

    def test_collect_paths_creates_placeholders_once(self) -> None:
        state = RawState()

        created = state.collect_paths(["/a.ts", "/b.ts"], "web")
        again = state.collect_paths(["/a.ts"], "web")

        assert [f.filepath for f in created] == ["/a.ts", "/b.ts"]
        assert again == []
        placeholder = state.get_file(file_id_for("/a.ts", "web"))
        assert placeholder is not None
        assert placeholder.project_name == "web"
        assert placeholder.tasks == []

    def test_remove_file_forgets_its_tasks(self, raw) -> None:
        state = RawState()
        state.collect_files([raw.file("f", [raw.suite("s", [raw.test("t")])]), raw.file("g", [])])

        state.remove_file("f")
        state.remove_file("missing")

        assert [f.id for f in state.files()] == ["g"]
        assert "t" not in state
        assert state.parent_of("t") is None
        assert state.file_of("s") is None


class TestUpdate:
    """Applying task updates."""

    def test_update_sets_result_and_merges_meta(self, raw) -> None:
        state = RawState()
        state.collect_files([raw.file("f", [raw.test("t")])])
        state.get("t").meta = {"a": 1}

        applied = state.update_tasks([("t", TaskResult(state="pass"), {"b": 2})])

        assert applied == ["t"]
        task = state.get("t")
        assert task.result.state == "pass"
        assert task.meta == {"a": 1, "b": 2}

    def test_unknown_ids_are_skipped(self, raw) -> None:
        state = RawState()
        state.collect_files([raw.file("f", [raw.test("t")])])

        applied = state.update_tasks([("ghost", TaskResult(state="fail"), None)])

        assert applied == []

    def test_clear(self, raw) -> None:
        state = RawState()
        state.collect_files([raw.file("f", [raw.test("t")])])

        state.clear()

        assert len(state) == 0
        assert state.files() == []
