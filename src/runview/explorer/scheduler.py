"""Rate-limited recomputation scheduler.

Design:
- Task update notifications are merged into a PendingSet (file id -> task ids)
- A RateLimitedTicker drains the set at most ``max_fps`` times per second
- Each drain runs targeted reconciliation, filtering and summary, in order,
  synchronously, so drains never interleave
- ``start_run`` arms a fallback full pass for runners that only report at
  the end; the first incremental update cancels it
- ``end_run`` pauses the ticker, discards pending ids and runs exactly one
  full pass, which supersedes any partial state

Everything runs on the asyncio loop thread. Without a running loop no
timers are armed and pending ids wait for ``flush()`` or ``end_run()``.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

import structlog

from runview.config.models import SchedulerConfig

logger = structlog.get_logger()


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class SchedulerState(Enum):
    """Run lifecycle as seen by the scheduler."""

    IDLE = "idle"
    RUNNING = "running"


@dataclass
class SchedulerStats:
    """Counters exposed for status output and tests."""

    drains: int = 0
    full_passes: int = 0
    updates_merged: int = 0


@dataclass
class PendingSet:
    """Task ids changed since the last drain, grouped by file id."""

    _by_file: dict[str, set[str]] = field(default_factory=dict)

    def add(self, file_id: str, task_id: str) -> None:
        self._by_file.setdefault(file_id, set()).add(task_id)

    def drain(self) -> dict[str, set[str]]:
        batch = self._by_file
        self._by_file = {}
        return batch

    def __len__(self) -> int:
        return sum(len(ids) for ids in self._by_file.values())

    def __bool__(self) -> bool:
        return bool(self._by_file)

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._by_file


class RateLimitedTicker:
    """Periodic asyncio task calling ``callback`` at most ``max_fps`` times/s.

    The callback returns False to pause the ticker. ``resume()`` restarts it.
    """

    def __init__(self, callback: Callable[[], bool], max_fps: float) -> None:
        self._callback = callback
        self.interval = 1.0 / max_fps
        self._task: asyncio.Task[None] | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def resume(self) -> None:
        if self.active:
            return
        loop = _running_loop()
        if loop is None:
            return
        self._task = loop.create_task(self._run())

    def pause(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _run(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval)
                if not self._callback():
                    break
        except asyncio.CancelledError:
            pass
        finally:
            if self._task is asyncio.current_task():
                self._task = None


class UpdateScheduler:
    """Coalesces task updates into bounded-rate drains.

    ``drain`` receives the pending batch and must run targeted
    reconciliation, filtering and summary. ``full_pass`` must run a full
    reconciliation followed by filtering and summary.
    """

    def __init__(
        self,
        drain: Callable[[dict[str, set[str]]], None],
        full_pass: Callable[[], None],
        config: SchedulerConfig | None = None,
    ) -> None:
        self.config = config or SchedulerConfig()
        self._drain = drain
        self._full_pass = full_pass
        self.state = SchedulerState.IDLE
        self.pending = PendingSet()
        self.stats = SchedulerStats()
        self.ticker = RateLimitedTicker(self._tick, self.config.max_fps)
        self._fallback: asyncio.TimerHandle | None = None
        self._incremental = False

    @property
    def incremental(self) -> bool:
        """True once an update arrived during the current run."""
        return self._incremental

    @property
    def fallback_pending(self) -> bool:
        return self._fallback is not None

    def start_run(self) -> None:
        self._cancel_fallback()
        self.state = SchedulerState.RUNNING
        self._incremental = False
        loop = _running_loop()
        if loop is not None:
            self._fallback = loop.call_later(self.config.fallback_timeout_sec, self._on_fallback)
        logger.debug("scheduler_run_started", fallback_sec=self.config.fallback_timeout_sec)

    def on_task_update(self, items: Iterable[tuple[str, str]]) -> None:
        """Merge ``(file_id, task_id)`` pairs into the pending set."""
        merged = 0
        for file_id, task_id in items:
            self.pending.add(file_id, task_id)
            merged += 1
        self.stats.updates_merged += merged

        if self.state is SchedulerState.RUNNING and not self._incremental:
            self._incremental = True
            self._cancel_fallback()
        if self.pending:
            self.ticker.resume()

    def flush(self) -> None:
        """Drain pending ids now, outside the ticker."""
        if not self.pending:
            return
        batch = self.pending.drain()
        self.stats.drains += 1
        self._drain(batch)

    def end_run(self) -> None:
        self.ticker.pause()
        self._cancel_fallback()
        discarded = len(self.pending)
        self.pending.drain()
        self._run_full_pass()
        self.state = SchedulerState.IDLE
        self._incremental = False
        logger.debug("scheduler_run_ended", discarded_pending=discarded, drains=self.stats.drains)

    def reset(self) -> None:
        """Return to idle without a full pass. Pending ids are dropped."""
        self._cancel_fallback()
        self.ticker.pause()
        self.pending.drain()
        self.state = SchedulerState.IDLE
        self._incremental = False

    async def close(self) -> None:
        """Like reset(), but waits for the ticker task to finish."""
        await self.ticker.stop()
        self.reset()

    def _tick(self) -> bool:
        try:
            self.flush()
        except Exception as e:
            logger.error("drain_failed", error=str(e))
        return bool(self.pending) or self.state is SchedulerState.RUNNING

    def _on_fallback(self) -> None:
        self._fallback = None
        logger.info("fallback_full_pass", reason="no_incremental_updates")
        self._run_full_pass()

    def _run_full_pass(self) -> None:
        self.stats.full_passes += 1
        self._full_pass()

    def _cancel_fallback(self) -> None:
        if self._fallback is not None:
            self._fallback.cancel()
            self._fallback = None
