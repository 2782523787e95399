"""Turn workflow definitions into persisted task graphs."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from .contracts import TaskStatus, WorkflowDefinition, WorkflowStatus, WorkflowStep
from .errors import (
    DependencyResolutionError,
    UnknownTaskTypeError,
    UnsupportedDependencyError,
)
from .jobs.registry import JobRegistry
from .persistence.models import Task, Workflow
from .persistence.repository import WorkflowRepository

logger = logging.getLogger(__name__)


def _serialize_payload(payload: Any) -> Optional[str]:
    if payload is None or isinstance(payload, str):
        return payload
    return json.dumps(payload)


class WorkflowBuilder:
    """Build and persist the task graph for a workflow definition.

    Dependencies are two levels deep: a step named by some ``dependsOn`` is a
    prerequisite, every other step is a dependent. Prerequisite tasks are
    saved first so that dependents can reference their identities.

    Construction is not atomic. If a dependent names an unknown task type,
    the workflow row and the prerequisite tasks have already been saved and
    are left in place; no dependent task is saved.
    """

    def __init__(
        self,
        repository: WorkflowRepository,
        registry: Optional[JobRegistry] = None,
    ) -> None:
        self._repository = repository
        self._registry = registry

    async def create_workflow_from_yaml(
        self, path: str | Path, client_id: str, payload: Any = None
    ) -> Workflow:
        """Load a YAML definition from ``path`` and build it."""
        definition = WorkflowDefinition.from_yaml(path)
        return await self.create_workflow(definition, client_id, payload)

    async def create_workflow(
        self, definition: WorkflowDefinition, client_id: str, payload: Any = None
    ) -> Workflow:
        """Persist a workflow and its tasks, then return it with tasks attached.

        Args:
            definition: Workflow name and ordered steps.
            client_id: Owner of the workflow and all of its tasks.
            payload: Initial data shared by every task. Non-string values are
                serialized to JSON.

        Raises:
            UnknownTaskTypeError: A step's task type has no registered job.
            UnsupportedDependencyError: A prerequisite step has a dependency.
            DependencyResolutionError: A ``dependsOn`` names no prerequisite.
        """
        self._check_task_types(definition.steps)
        prerequisite_steps = definition.prerequisite_steps()
        dependent_steps = definition.dependent_steps()
        for step in prerequisite_steps:
            if step.depends_on:
                raise UnsupportedDependencyError(step.task_type, step.depends_on)

        serialized = _serialize_payload(payload)
        workflow = Workflow(
            client_id=client_id, name=definition.name, status=WorkflowStatus.INITIAL
        )
        await self._repository.save_workflow(workflow)
        logger.info(
            f"Created workflow {workflow.workflow_id} ({definition.name}) for client {client_id}"
        )

        prerequisites = self._materialize(workflow, prerequisite_steps, serialized)
        await self._repository.save_tasks(prerequisites)

        try:
            dependents = self._materialize(
                workflow, dependent_steps, serialized, prerequisites
            )
        except DependencyResolutionError as exc:
            logger.warning(
                f"Workflow {workflow.workflow_id} left without dependent tasks: {exc}. "
                f"{len(prerequisites)} prerequisite task(s) were already saved."
            )
            raise
        await self._repository.save_tasks(dependents)

        workflow.tasks = sorted(
            prerequisites + dependents, key=lambda task: task.step_number
        )
        logger.debug(
            f"Workflow {workflow.workflow_id}: {len(prerequisites)} prerequisite and "
            f"{len(dependents)} dependent task(s)"
        )
        return workflow

    def _check_task_types(self, steps: Iterable[WorkflowStep]) -> None:
        if self._registry is None:
            return
        for step in steps:
            if step.task_type not in self._registry:
                raise UnknownTaskTypeError(step.task_type)

    @staticmethod
    def _materialize(
        workflow: Workflow,
        steps: Iterable[WorkflowStep],
        payload: Optional[str],
        prerequisites: Optional[list[Task]] = None,
    ) -> list[Task]:
        tasks: list[Task] = []
        for step in steps:
            task = Task(
                workflow_id=workflow.workflow_id,
                client_id=workflow.client_id,
                task_type=step.task_type,
                step_number=step.step_number,
                status=TaskStatus.QUEUED,
                payload=payload,
            )
            if prerequisites is not None and step.depends_on:
                dependency = next(
                    (p for p in prerequisites if p.task_type == step.depends_on), None
                )
                if dependency is None:
                    raise DependencyResolutionError(step.depends_on, step.task_type)
                task.depends_on_id = dependency.task_id
            tasks.append(task)
        return tasks
