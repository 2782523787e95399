"""Repository abstraction for workflow and task persistence."""

from __future__ import annotations

from typing import Protocol, Sequence

from ..contracts import TaskStatus
from .models import Task, Workflow


class WorkflowRepository(Protocol):
    """Protocol for workflow state persistence backends.

    ``save_*`` methods assign an identity on first save and set it on the
    passed entity, so callers may keep using the objects they saved.
    """

    async def save_workflow(self, workflow: Workflow) -> Workflow:
        """Insert or update a workflow row. Its tasks are not saved."""

    async def save_task(self, task: Task) -> Task:
        """Insert or update a single task."""

    async def save_tasks(self, tasks: Sequence[Task]) -> list[Task]:
        """Insert or update several tasks in order."""

    async def find_tasks(
        self,
        *,
        status: TaskStatus | None = None,
        workflow_id: str | None = None,
    ) -> list[Task]:
        """Return matching tasks ordered by ascending ``step_number``."""

    async def find_task(self, task_id: str) -> Task | None:
        """Retrieve a task by id."""

    async def find_workflow(self, workflow_id: str) -> Workflow | None:
        """Retrieve a workflow by id, with its tasks attached."""

    async def list_workflows(self) -> list[Workflow]:
        """Return all persisted workflows without their tasks."""
