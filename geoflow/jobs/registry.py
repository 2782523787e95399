"""Registry mapping task types to job implementations."""

from __future__ import annotations

from typing import Dict, Iterator, List

from ..constants import POLYGON_AREA_TASK, REPORT_GENERATION_TASK
from ..errors import UnknownTaskTypeError
from .base import Job
from .polygon_area import PolygonAreaJob
from .report import ReportGenerationJob


class JobRegistry:
    """Typed lookup from ``task_type`` to the :class:`Job` that runs it.

    Registering the same task type twice replaces the earlier job.
    """

    def __init__(self) -> None:
        self._jobs: Dict[str, Job] = {}

    def register(self, task_type: str, job: Job) -> None:
        if not task_type:
            raise ValueError("task_type must be a non-empty string")
        if not isinstance(job, Job):
            raise TypeError(f"Expected a Job instance, got {type(job).__name__}")
        self._jobs[task_type] = job

    def resolve(self, task_type: str) -> Job:
        try:
            return self._jobs[task_type]
        except KeyError:
            raise UnknownTaskTypeError(task_type) from None

    def waits_for_preceding(self, task_type: str) -> bool:
        """Whether tasks of ``task_type`` are gated on all earlier steps."""
        job = self._jobs.get(task_type)
        return bool(job and job.waits_for_preceding)

    def task_types(self) -> List[str]:
        return list(self._jobs)

    def __contains__(self, task_type: object) -> bool:
        return task_type in self._jobs

    def __iter__(self) -> Iterator[str]:
        return iter(self._jobs)

    def __len__(self) -> int:
        return len(self._jobs)


def default_registry() -> JobRegistry:
    """Return a registry with the built-in jobs under their standard names."""

    registry = JobRegistry()
    registry.register(POLYGON_AREA_TASK, PolygonAreaJob())
    registry.register(REPORT_GENERATION_TASK, ReportGenerationJob())
    return registry
