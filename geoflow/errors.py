"""Exception types raised by geoflow."""

from __future__ import annotations


class GeoflowError(Exception):
    """Base class for all geoflow errors."""


class WorkflowDefinitionError(GeoflowError):
    """The workflow definition document could not be loaded or validated."""


class DependencyResolutionError(GeoflowError):
    """A step names a ``dependsOn`` task type that no prerequisite provides."""

    def __init__(self, missing_task_type: str, task_type: str) -> None:
        self.missing_task_type = missing_task_type
        self.task_type = task_type
        super().__init__(
            f"Task dependency {missing_task_type} not found for task {task_type}"
        )


class UnsupportedDependencyError(GeoflowError):
    """A prerequisite step declares a dependency of its own."""

    def __init__(self, task_type: str, depends_on: str) -> None:
        self.task_type = task_type
        self.depends_on = depends_on
        super().__init__(
            f"Task {task_type} is a dependency of another step and cannot itself "
            f"depend on {depends_on}; only two-level dependency graphs are supported"
        )


class UnknownTaskTypeError(GeoflowError):
    """No job is registered for a task type."""

    def __init__(self, task_type: str) -> None:
        self.task_type = task_type
        super().__init__(f"No job registered for task type: {task_type}")


class TaskStateError(GeoflowError):
    """An illegal task status transition was attempted."""


class WorkflowNotFoundError(GeoflowError):
    """The requested workflow does not exist."""

    def __init__(self, workflow_id: str) -> None:
        self.workflow_id = workflow_id
        super().__init__(f"Workflow not found: {workflow_id}")


class WorkflowNotCompletedError(GeoflowError):
    """Workflow results were requested before the workflow completed."""

    def __init__(self, workflow_id: str, status: str) -> None:
        self.workflow_id = workflow_id
        self.status = status
        super().__init__(f"Workflow {workflow_id} is not completed (status: {status})")
