"""Polling scheduler that drives queued tasks through their lifecycle."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from .config import SchedulerConfig
from .constants import DEFAULT_POLL_INTERVAL
from .contracts import TaskStatus
from .jobs.registry import JobRegistry
from .persistence.repository import WorkflowRepository
from .readiness import ReadinessEvaluator
from .runner import TaskRunner

logger = logging.getLogger(__name__)


class CycleReport(BaseModel):
    """What happened to each queued task during one scheduling cycle."""

    executed: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    errored: List[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.executed) + len(self.skipped) + len(self.errored)


class TaskScheduler:
    """Level-triggered poll-and-retry scheduler.

    Each cycle reads every queued task across all workflows in step order,
    re-evaluates readiness from scratch and runs ready tasks one at a time.
    Tasks that are not ready are left queued for the next cycle.

    Only one scheduler may run against a store at a time: tasks are not
    claimed atomically, so a second instance would execute them twice.
    """

    def __init__(
        self,
        repository: WorkflowRepository,
        registry: JobRegistry,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        task_delay: float = 0.0,
        task_timeout: Optional[float] = None,
        runner: Optional[TaskRunner] = None,
    ) -> None:
        self._repository = repository
        self._readiness = ReadinessEvaluator(repository, registry)
        self._runner = runner or TaskRunner(repository, registry, task_timeout)
        self.poll_interval = poll_interval
        self.task_delay = task_delay
        self._stop_event = asyncio.Event()
        self._running = False

    @classmethod
    def from_config(
        cls,
        repository: WorkflowRepository,
        registry: JobRegistry,
        config: SchedulerConfig,
    ) -> "TaskScheduler":
        return cls(
            repository,
            registry,
            poll_interval=config.poll_interval,
            task_delay=config.task_delay,
            task_timeout=config.task_timeout,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    async def run_once(self) -> CycleReport:
        """Run a single scheduling cycle over the current queue."""
        report = CycleReport()
        queued = await self._repository.find_tasks(status=TaskStatus.QUEUED)
        logger.debug(f"Scheduling cycle found {len(queued)} queued task(s)")

        for task in queued:
            if self._running and self._stop_event.is_set():
                break
            try:
                if not await self._readiness.is_ready(task):
                    report.skipped.append(task.task_id)
                    continue
                await self._runner.run(task)
                report.executed.append(task.task_id)
            except Exception:
                logger.exception(
                    f"Task {task.task_id} raised outside its job; "
                    "its status is whatever the runner last saved"
                )
                report.errored.append(task.task_id)
                continue

            if self.task_delay:
                await self._pause(self.task_delay)

        return report

    async def start(
        self, lifespan: Optional[float] = None, max_cycles: Optional[int] = None
    ) -> None:
        """Poll until :meth:`stop` is called.

        Args:
            lifespan: Stop after this many seconds. If None, runs indefinitely.
            max_cycles: Stop after this many cycles. If None, no limit.
        """
        if self._running:
            raise RuntimeError("Scheduler is already running")
        self._running = True
        loop = asyncio.get_running_loop()
        deadline = loop.time() + lifespan if lifespan is not None else None
        cycles = 0
        logger.info(f"Scheduler started (poll interval {self.poll_interval}s)")
        try:
            while not self._stop_event.is_set():
                await self.run_once()
                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    break
                if deadline is not None:
                    remaining = deadline - loop.time()
                    if remaining <= 0:
                        break
                    await self._pause(min(self.poll_interval, remaining))
                else:
                    await self._pause(self.poll_interval)
        finally:
            self._running = False
            self._stop_event.clear()
            logger.info(f"Scheduler stopped after {cycles} cycle(s)")

    def stop(self) -> None:
        """Ask a running :meth:`start` loop to exit after the current task.

        A stop requested before :meth:`start` makes it return without polling.
        """
        self._stop_event.set()

    async def _pause(self, seconds: float) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
