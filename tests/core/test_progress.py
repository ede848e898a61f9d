"""Tests for console status helpers."""

import pytest

from runview.core.progress import get_console, pluralize, status


class TestPluralize:
    """pluralize() tests."""

    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, "0 files"), (1, "1 file"), (3, "3 files")],
    )
    def test_default_plural(self, count: int, expected: str) -> None:
        """Default plural appends an s."""
        assert pluralize(count, "file") == expected

    def test_explicit_plural(self) -> None:
        """Irregular plurals can be supplied."""
        assert pluralize(2, "entry", "entries") == "2 entries"


class TestStatus:
    """status() tests."""

    def test_given_success_style_when_printed_then_has_check_mark(self) -> None:
        """Success messages carry a check mark prefix on stderr."""
        console = get_console()
        with console.capture() as capture:
            status("Run finished", style="success")

        assert "✓ Run finished" in capture.get()

    def test_given_indent_when_printed_then_padded(self) -> None:
        """Indent adds leading spaces before the prefix."""
        console = get_console()
        with console.capture() as capture:
            status("nested", style="none", indent=4)

        assert capture.get().startswith("    nested")
