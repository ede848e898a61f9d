"""Commands sent back to the test runner.

The explorer only fires commands; it never waits for their effect. The
runner reports the outcome through the regular event stream.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any, Protocol

import httpx
import structlog

from runview.config.models import TransportConfig
from runview.core.errors import TransportError

logger = structlog.get_logger()


class Transport(Protocol):
    """Outbound runner commands. Implementations may return an awaitable."""

    def rerun(self, filepaths: list[str]) -> Awaitable[None] | None: ...

    def rerun_task(self, task_id: str) -> Awaitable[None] | None: ...


class NullTransport:
    """Transport that records commands without sending them."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def rerun(self, filepaths: list[str]) -> None:
        self.calls.append(("rerun", list(filepaths)))

    def rerun_task(self, task_id: str) -> None:
        self.calls.append(("rerun_task", task_id))


class HttpTransport:
    """Posts commands to the runner's HTTP command API.

    Endpoints:
        POST /rerun       {"files": [...]}
        POST /rerun-task  {"id": "..."}
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or TransportConfig()
        self._client = client or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_sec,
        )

    async def rerun(self, filepaths: list[str]) -> None:
        await self._post("rerun", "/rerun", {"files": list(filepaths)})

    async def rerun_task(self, task_id: str) -> None:
        await self._post("rerun_task", "/rerun-task", {"id": task_id})

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, command: str, path: str, payload: dict[str, Any]) -> None:
        try:
            response = await self._client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise TransportError.request_failed(command, str(e)) from e
        logger.debug("runner_command_sent", command=command, status=response.status_code)
