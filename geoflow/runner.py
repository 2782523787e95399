"""Dispatch a ready task to its job and persist the outcome."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .contracts import JobOutcome, TaskStatus
from .errors import TaskStateError, UnknownTaskTypeError
from .jobs.base import Job, JobContext
from .jobs.registry import JobRegistry
from .persistence.models import Task
from .persistence.repository import WorkflowRepository
from .status import refresh_workflow_status

logger = logging.getLogger(__name__)


class TaskRunner:
    """Resolve, invoke and persist. No business logic lives here.

    The task moves to ``running`` before the job is invoked and its terminal
    status and output are written once afterwards. The ``running`` write is
    not a guarded claim: two runners sharing a store can both pick up the
    same queued task.
    """

    def __init__(
        self,
        repository: WorkflowRepository,
        registry: JobRegistry,
        task_timeout: Optional[float] = None,
    ) -> None:
        self._repository = repository
        self._registry = registry
        self._task_timeout = task_timeout
        self._context = JobContext(repository=repository)

    async def run(self, task: Task) -> Task:
        if task.status != TaskStatus.QUEUED:
            raise TaskStateError(
                f"Task {task.task_id} is {task.status.value}; only queued tasks can run"
            )

        try:
            job = self._registry.resolve(task.task_type)
        except UnknownTaskTypeError as exc:
            logger.error(f"Task {task.task_id}: {exc}")
            outcome = JobOutcome.failure(str(exc))
        else:
            await self._hand_down_input(task)
            task.mark_running()
            await self._repository.save_task(task)
            logger.info(f"Running task {task.task_id} ({task.task_type})")
            outcome = await self._execute(job, task)

        task.finish(outcome)
        await self._repository.save_task(task)
        logger.info(f"Task {task.task_id} finished with status {task.status.value}")

        await refresh_workflow_status(self._repository, task.workflow_id)
        return task

    async def _hand_down_input(self, task: Task) -> None:
        if task.depends_on_id is None:
            return
        dependency = await self._repository.find_task(task.depends_on_id)
        if dependency is not None:
            task.input = dependency.output

    async def _execute(self, job: Job, task: Task) -> JobOutcome:
        if self._task_timeout is None:
            return await job.execute(task, self._context)
        try:
            return await asyncio.wait_for(
                job.execute(task, self._context), timeout=self._task_timeout
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Task {task.task_id} timed out after {self._task_timeout}s"
            )
            return JobOutcome.failure(f"Task timed out after {self._task_timeout}s")
