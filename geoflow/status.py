"""Workflow status aggregation and read-only status queries."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .contracts import TaskStatus, WorkflowStatus
from .errors import WorkflowNotCompletedError, WorkflowNotFoundError
from .persistence.models import Task, Workflow
from .persistence.repository import WorkflowRepository

logger = logging.getLogger(__name__)


class WorkflowStatusView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    workflow_id: str = Field(alias="workflowId")
    status: WorkflowStatus
    completed_tasks: int = Field(alias="completedTasks")
    total_tasks: int = Field(alias="totalTasks")


class WorkflowResultsView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    workflow_id: str = Field(alias="workflowId")
    status: WorkflowStatus
    final_result: Any = Field(default=None, alias="finalResult")


def aggregate_status(tasks: list[Task]) -> Optional[WorkflowStatus]:
    """Derive the workflow status from its tasks.

    Returns ``None`` when nothing has happened yet and the current status
    should be kept.
    """
    if not tasks:
        return None
    if all(task.is_terminal for task in tasks):
        if any(task.status == TaskStatus.FAILED for task in tasks):
            return WorkflowStatus.FAILED
        return WorkflowStatus.COMPLETED
    if any(task.status != TaskStatus.QUEUED for task in tasks):
        return WorkflowStatus.IN_PROGRESS
    return None


async def refresh_workflow_status(
    repository: WorkflowRepository, workflow_id: str
) -> Optional[Workflow]:
    """Recompute and save the aggregate status of a workflow.

    A completed workflow's ``final_result`` is the output of its last step.
    """
    workflow = await repository.find_workflow(workflow_id)
    if workflow is None:
        logger.warning(f"Cannot refresh status of missing workflow {workflow_id}")
        return None

    status = aggregate_status(workflow.tasks)
    if status is None or status == workflow.status:
        return workflow

    workflow.status = status
    if status == WorkflowStatus.COMPLETED:
        last_task = max(workflow.tasks, key=lambda task: task.step_number)
        workflow.final_result = last_task.output
    await repository.save_workflow(workflow)
    logger.info(f"Workflow {workflow_id} is now {status.value}")
    return workflow


async def _load(repository: WorkflowRepository, workflow_id: str) -> Workflow:
    workflow = await repository.find_workflow(workflow_id)
    if workflow is None:
        raise WorkflowNotFoundError(workflow_id)
    return workflow


async def get_workflow_status(
    repository: WorkflowRepository, workflow_id: str
) -> WorkflowStatusView:
    workflow = await _load(repository, workflow_id)
    return WorkflowStatusView(
        workflow_id=workflow_id,
        status=workflow.status,
        completed_tasks=workflow.completed_tasks,
        total_tasks=len(workflow.tasks),
    )


async def get_workflow_results(
    repository: WorkflowRepository, workflow_id: str
) -> WorkflowResultsView:
    """Return the final result of a completed workflow.

    Raises:
        WorkflowNotFoundError: No workflow has this id.
        WorkflowNotCompletedError: The workflow is not completed yet, or failed.
    """
    workflow = await _load(repository, workflow_id)
    if workflow.status != WorkflowStatus.COMPLETED:
        raise WorkflowNotCompletedError(workflow_id, workflow.status.value)
    final_result = json.loads(workflow.final_result) if workflow.final_result else None
    return WorkflowResultsView(
        workflow_id=workflow_id, status=workflow.status, final_result=final_result
    )
