"""Tests for the barrier and point-dependency readiness gates."""

import pytest

from geoflow.contracts import TaskStatus
from geoflow.persistence import Task
from geoflow.readiness import (
    ReadinessEvaluator,
    barrier_gate,
    dependency_blocked,
    dependency_gate,
)


def _task(task_id, step_number, status=TaskStatus.QUEUED, task_type="area", **kwargs):
    return Task(
        task_id=task_id,
        workflow_id=kwargs.pop("workflow_id", "wf"),
        client_id="c",
        task_type=task_type,
        step_number=step_number,
        status=status,
        **kwargs,
    )


def test_barrier_passes_when_preceding_tasks_completed_or_failed():
    tasks = [
        _task("1", 1, TaskStatus.COMPLETED),
        _task("2", 2, TaskStatus.FAILED),
        _task("3", 3, task_type="report"),
    ]
    assert barrier_gate(tasks[2], tasks) is True


@pytest.mark.parametrize("status", [TaskStatus.QUEUED, TaskStatus.RUNNING])
def test_barrier_blocks_on_unfinished_preceding_task(status):
    tasks = [
        _task("1", 1, TaskStatus.COMPLETED),
        _task("2", 2, status),
        _task("3", 3, task_type="report"),
    ]
    assert barrier_gate(tasks[2], tasks) is False


def test_barrier_ignores_same_and_later_steps_and_other_workflows():
    report = _task("3", 3, task_type="report")
    tasks = [
        _task("1", 1, TaskStatus.COMPLETED),
        _task("peer", 3, TaskStatus.QUEUED),
        _task("4", 4, TaskStatus.QUEUED),
        _task("x", 1, TaskStatus.QUEUED, workflow_id="other"),
        report,
    ]
    assert barrier_gate(report, tasks) is True


def test_dependency_gate():
    completed = _task("1", 1, TaskStatus.COMPLETED)
    queued = _task("1", 1, TaskStatus.QUEUED)
    failed = _task("1", 1, TaskStatus.FAILED)
    dependent = _task("2", 2, depends_on_id="1")

    assert dependency_gate(_task("solo", 1), None) is True
    assert dependency_gate(dependent, completed) is True
    assert dependency_gate(dependent, queued) is False
    assert dependency_gate(dependent, failed) is False
    assert dependency_gate(dependent, None) is False


def test_dependency_blocked_only_for_failed_dependency():
    dependent = _task("2", 2, depends_on_id="1")
    assert dependency_blocked(dependent, _task("1", 1, TaskStatus.FAILED)) is True
    assert dependency_blocked(dependent, _task("1", 1, TaskStatus.QUEUED)) is False
    assert dependency_blocked(_task("solo", 1), None) is False


@pytest.mark.asyncio
async def test_evaluator_applies_barrier_only_to_waiting_job_types(repo, registry):
    first = _task(None, 1)
    await repo.save_task(first)
    later_area = _task(None, 2)
    report = _task(None, 3, task_type="report")
    await repo.save_tasks([later_area, report])

    evaluator = ReadinessEvaluator(repo, registry)
    assert await evaluator.is_ready(later_area) is True
    assert await evaluator.is_ready(report) is False


@pytest.mark.asyncio
async def test_evaluator_failed_dependency_stays_blocked(repo, registry, caplog):
    dependency = _task(None, 1, TaskStatus.FAILED)
    await repo.save_task(dependency)
    dependent = _task(None, 2, task_type="report", depends_on_id=dependency.task_id)
    await repo.save_task(dependent)

    evaluator = ReadinessEvaluator(repo, registry)
    with caplog.at_level("WARNING", logger="geoflow.readiness"):
        for _ in range(3):
            assert await evaluator.is_ready(dependent) is False
    assert "will stay queued" in caplog.text

    stored = await repo.find_task(dependent.task_id)
    assert stored.status == TaskStatus.QUEUED


@pytest.mark.asyncio
async def test_evaluator_completed_dependency_is_ready(repo, registry):
    dependency = _task(None, 1, TaskStatus.COMPLETED)
    await repo.save_task(dependency)
    dependent = _task(None, 2, depends_on_id=dependency.task_id)
    await repo.save_task(dependent)

    assert await ReadinessEvaluator(repo, registry).is_ready(dependent) is True
