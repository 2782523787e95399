"""Readiness rules deciding whether a queued task may run now."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .contracts import TaskStatus
from .jobs.registry import JobRegistry
from .persistence.models import Task
from .persistence.repository import WorkflowRepository

logger = logging.getLogger(__name__)


def barrier_gate(task: Task, workflow_tasks: Iterable[Task]) -> bool:
    """True when every earlier step of the workflow is completed or failed."""
    return all(
        other.is_terminal
        for other in workflow_tasks
        if other.workflow_id == task.workflow_id
        and other.task_id != task.task_id
        and other.step_number < task.step_number
    )


def dependency_gate(task: Task, dependency: Optional[Task]) -> bool:
    """True when the task has no dependency or its dependency completed."""
    if task.depends_on_id is None:
        return True
    return dependency is not None and dependency.status == TaskStatus.COMPLETED


def dependency_blocked(task: Task, dependency: Optional[Task]) -> bool:
    """True when the dependency failed, so the task can never become ready."""
    return (
        task.depends_on_id is not None
        and dependency is not None
        and dependency.status == TaskStatus.FAILED
    )


class ReadinessEvaluator:
    """Load the state a task's gates need and apply them.

    The barrier gate applies to task types whose job waits for preceding
    steps; the dependency gate applies to tasks with a ``depends_on_id``.
    """

    def __init__(self, repository: WorkflowRepository, registry: JobRegistry) -> None:
        self._repository = repository
        self._registry = registry

    async def is_ready(self, task: Task) -> bool:
        if self._registry.waits_for_preceding(task.task_type):
            workflow_tasks = await self._repository.find_tasks(
                workflow_id=task.workflow_id
            )
            if not barrier_gate(task, workflow_tasks):
                logger.info(
                    f"Task {task.task_id} is waiting for preceding tasks to complete or fail"
                )
                return False

        if task.depends_on_id is not None:
            dependency = await self._repository.find_task(task.depends_on_id)
            if not dependency_gate(task, dependency):
                if dependency_blocked(task, dependency):
                    logger.warning(
                        f"Task {task.task_id} depends on failed task {task.depends_on_id} "
                        "and will stay queued"
                    )
                else:
                    logger.info(
                        f"Task {task.task_id} is waiting for task {task.depends_on_id} to complete"
                    )
                return False

        return True
