"""In-memory implementation of the workflow repository."""

from __future__ import annotations

import uuid
from typing import Dict, Sequence

from ..contracts import TaskStatus
from .models import Task, Workflow
from .repository import WorkflowRepository


class InMemoryWorkflowRepository(WorkflowRepository):
    """Store workflow state in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Entities are copied on the way in and
    out so that unsaved changes never leak into the store.
    """

    def __init__(self) -> None:
        self._workflows: Dict[str, Workflow] = {}
        self._tasks: Dict[str, Task] = {}

    # ------------------------------------------------------------------
    async def save_workflow(self, workflow: Workflow) -> Workflow:
        if workflow.workflow_id is None:
            workflow.workflow_id = str(uuid.uuid4())
        self._workflows[workflow.workflow_id] = workflow.model_copy(
            update={"tasks": []}, deep=True
        )
        return workflow

    async def save_task(self, task: Task) -> Task:
        if task.task_id is None:
            task.task_id = str(uuid.uuid4())
        self._tasks[task.task_id] = task.model_copy(deep=True)
        return task

    async def save_tasks(self, tasks: Sequence[Task]) -> list[Task]:
        return [await self.save_task(task) for task in tasks]

    async def find_tasks(
        self,
        *,
        status: TaskStatus | None = None,
        workflow_id: str | None = None,
    ) -> list[Task]:
        matches = [
            task
            for task in self._tasks.values()
            if (status is None or task.status == status)
            and (workflow_id is None or task.workflow_id == workflow_id)
        ]
        # sorted() is stable, so ties keep insertion order
        return [
            task.model_copy(deep=True)
            for task in sorted(matches, key=lambda t: t.step_number)
        ]

    async def find_task(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task else None

    async def find_workflow(self, workflow_id: str) -> Workflow | None:
        wf = self._workflows.get(workflow_id)
        if wf is None:
            return None
        tasks = await self.find_tasks(workflow_id=workflow_id)
        return wf.model_copy(update={"tasks": tasks}, deep=True)

    async def list_workflows(self) -> list[Workflow]:
        return [wf.model_copy(deep=True) for wf in self._workflows.values()]
