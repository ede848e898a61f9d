"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local runview package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of runview modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("runview"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def _isolate_global_config(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keep a developer's ~/.config/runview/config.yaml out of every test."""
    from runview.config import loader

    monkeypatch.setattr(
        loader, "GLOBAL_CONFIG_PATH", tmp_path_factory.mktemp("global") / "config.yaml"
    )


@pytest.fixture(autouse=True)
def _clear_log_context() -> Iterator[None]:
    """Run ids bound by one test must not leak into the next."""
    import structlog

    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


class RawBuilder:
    """Shorthand constructors for raw task trees."""

    @staticmethod
    def test(
        task_id: str,
        state: str | None = None,
        *,
        name: str | None = None,
        mode: str = "run",
        duration: float | None = None,
        errors: list[str] | None = None,
    ) -> Any:
        from runview.client.models import RawTest

        return RawTest(
            id=task_id,
            name=name or task_id,
            mode=mode,
            result=RawBuilder.result(state, duration, errors),
        )

    @staticmethod
    def suite(
        task_id: str,
        tasks: list[Any],
        state: str | None = None,
        *,
        name: str | None = None,
        mode: str = "run",
    ) -> Any:
        from runview.client.models import RawSuite

        return RawSuite(
            id=task_id,
            name=name or task_id,
            mode=mode,
            tasks=tasks,
            result=RawBuilder.result(state),
        )

    @staticmethod
    def file(
        task_id: str,
        tasks: list[Any],
        state: str | None = None,
        *,
        filepath: str | None = None,
        project_name: str | None = None,
        duration: float | None = None,
        mode: str = "run",
    ) -> Any:
        from runview.client.models import RawFile

        return RawFile(
            id=task_id,
            name=filepath or f"{task_id}.test.ts",
            filepath=filepath or f"/repo/{task_id}.test.ts",
            project_name=project_name,
            mode=mode,
            tasks=tasks,
            result=RawBuilder.result(state, duration),
        )

    @staticmethod
    def result(
        state: str | None,
        duration: float | None = None,
        errors: list[str] | None = None,
    ) -> Any:
        from runview.client.models import TaskError, TaskResult

        if state is None and duration is None and not errors:
            return None
        return TaskResult(
            state=state,
            duration=duration,
            errors=[TaskError(message=message) for message in errors or ()],
        )


@pytest.fixture
def raw() -> type[RawBuilder]:
    """Raw task tree builders."""
    return RawBuilder
