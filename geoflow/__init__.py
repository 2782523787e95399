"""geoflow: polling workflow orchestration for geospatial jobs."""

from .builder import WorkflowBuilder
from .contracts import (
    JobOutcome,
    TaskStatus,
    WorkflowDefinition,
    WorkflowStatus,
    WorkflowStep,
)
from .jobs import Job, JobContext, JobRegistry, default_registry
from .persistence import Task, Workflow, get_repository
from .readiness import ReadinessEvaluator
from .runner import TaskRunner
from .scheduler import TaskScheduler
from .status import get_workflow_results, get_workflow_status

__version__ = "0.1.0"
__all__ = [
    "WorkflowBuilder",
    "WorkflowDefinition",
    "WorkflowStep",
    "WorkflowStatus",
    "TaskStatus",
    "JobOutcome",
    "Job",
    "JobContext",
    "JobRegistry",
    "default_registry",
    "Task",
    "Workflow",
    "get_repository",
    "ReadinessEvaluator",
    "TaskRunner",
    "TaskScheduler",
    "get_workflow_status",
    "get_workflow_results",
]
