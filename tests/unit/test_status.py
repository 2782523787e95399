"""Tests for workflow status aggregation and queries."""

import pytest

from geoflow.contracts import JobOutcome, TaskStatus, WorkflowStatus
from geoflow.errors import WorkflowNotCompletedError, WorkflowNotFoundError
from geoflow.persistence import Task, Workflow
from geoflow.status import (
    aggregate_status,
    get_workflow_results,
    get_workflow_status,
    refresh_workflow_status,
)


def _task(step_number, status):
    return Task(
        workflow_id="wf",
        client_id="c",
        task_type="area",
        step_number=step_number,
        status=status,
    )


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ([], None),
        ([TaskStatus.QUEUED, TaskStatus.QUEUED], None),
        ([TaskStatus.COMPLETED, TaskStatus.QUEUED], WorkflowStatus.IN_PROGRESS),
        ([TaskStatus.RUNNING, TaskStatus.QUEUED], WorkflowStatus.IN_PROGRESS),
        ([TaskStatus.COMPLETED, TaskStatus.COMPLETED], WorkflowStatus.COMPLETED),
        ([TaskStatus.FAILED, TaskStatus.COMPLETED], WorkflowStatus.FAILED),
    ],
)
def test_aggregate_status(statuses, expected):
    tasks = [_task(i + 1, s) for i, s in enumerate(statuses)]
    assert aggregate_status(tasks) == expected


async def _workflow_with(repo, *outcomes):
    workflow = Workflow(client_id="c", name="wf")
    await repo.save_workflow(workflow)
    tasks = []
    for step, outcome in enumerate(outcomes, start=1):
        task = Task(
            workflow_id=workflow.workflow_id,
            client_id="c",
            task_type="area",
            step_number=step,
        )
        if outcome is not None:
            task.finish(outcome)
        tasks.append(task)
    await repo.save_tasks(tasks)
    return workflow


@pytest.mark.asyncio
async def test_status_view_counts_completed_tasks(repo):
    workflow = await _workflow_with(repo, JobOutcome.success({"a": 1}), None)
    await refresh_workflow_status(repo, workflow.workflow_id)

    view = await get_workflow_status(repo, workflow.workflow_id)
    assert view.model_dump(by_alias=True, mode="json") == {
        "workflowId": workflow.workflow_id,
        "status": "in_progress",
        "completedTasks": 1,
        "totalTasks": 2,
    }


@pytest.mark.asyncio
async def test_results_of_completed_workflow_use_last_step_output(repo):
    workflow = await _workflow_with(
        repo, JobOutcome.success({"a": 1}), JobOutcome.success({"finalReport": "ok"})
    )
    refreshed = await refresh_workflow_status(repo, workflow.workflow_id)
    assert refreshed.status == WorkflowStatus.COMPLETED

    results = await get_workflow_results(repo, workflow.workflow_id)
    assert results.final_result == {"finalReport": "ok"}
    assert results.model_dump(by_alias=True)["finalResult"] == {"finalReport": "ok"}


@pytest.mark.asyncio
async def test_results_require_completed_workflow(repo):
    workflow = await _workflow_with(repo, None)
    with pytest.raises(WorkflowNotCompletedError, match="not completed"):
        await get_workflow_results(repo, workflow.workflow_id)

    failed = await _workflow_with(repo, JobOutcome.failure("boom"))
    await refresh_workflow_status(repo, failed.workflow_id)
    with pytest.raises(WorkflowNotCompletedError):
        await get_workflow_results(repo, failed.workflow_id)


@pytest.mark.asyncio
async def test_unknown_workflow(repo):
    with pytest.raises(WorkflowNotFoundError):
        await get_workflow_status(repo, "missing")
    with pytest.raises(WorkflowNotFoundError):
        await get_workflow_results(repo, "missing")
    assert await refresh_workflow_status(repo, "missing") is None
