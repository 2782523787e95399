"""Job contract shared by every task handler."""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from ..contracts import JobOutcome
from ..persistence.models import Task

if TYPE_CHECKING:
    from ..persistence.repository import WorkflowRepository

logger = logging.getLogger(__name__)


@dataclass
class JobContext:
    """Collaborators a job may use while executing a task."""

    repository: "WorkflowRepository"


class Job(metaclass=abc.ABCMeta):
    """Polymorphic execution unit bound to a task type.

    Subclasses implement :meth:`run` and either return a JSON-serializable
    result, return a :class:`JobOutcome` directly, or raise. Callers always
    go through :meth:`execute`, which turns every outcome into a terminal
    :class:`JobOutcome` and never raises.
    """

    #: When true, the task may only run once every task with a lower step
    #: number in its workflow is completed or failed.
    waits_for_preceding: ClassVar[bool] = False

    @abc.abstractmethod
    async def run(self, task: Task, context: JobContext) -> Any:
        """Do the work for ``task`` and return its result."""
        raise NotImplementedError

    async def execute(self, task: Task, context: JobContext) -> JobOutcome:
        try:
            result = await self.run(task, context)
            if isinstance(result, JobOutcome):
                return result
            return JobOutcome.success(result)
        except Exception as exc:
            logger.error(
                f"{type(self).__name__} failed for task {task.task_id}: {exc}"
            )
            return JobOutcome.failure(str(exc) or type(exc).__name__)
