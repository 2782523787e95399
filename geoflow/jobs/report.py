from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import ALL_SUCCEEDED_REPORT, SOME_FAILED_REPORT
from ..contracts import TaskStatus
from ..persistence.models import Task
from .base import Job, JobContext

logger = logging.getLogger(__name__)


class ReportTask(BaseModel):
    """One preceding task as it appears in a report."""

    model_config = ConfigDict(populate_by_name=True)

    task_id: Optional[str] = Field(alias="taskId")
    type: str
    output: Any = None
    status: TaskStatus


class ReportOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    workflow_id: str = Field(alias="workflowId")
    tasks: list[ReportTask] = Field(default_factory=list)
    final_report: str = Field(alias="finalReport")


class ReportGenerationJob(Job):
    """Aggregate the outcome of every earlier step in the workflow.

    The job only runs once all earlier steps are terminal, so it reports on
    final statuses and outputs. A failed predecessor does not fail the report;
    it changes the summary.
    """

    waits_for_preceding = True

    async def run(self, task: Task, context: JobContext) -> dict[str, Any]:
        tasks = await context.repository.find_tasks(workflow_id=task.workflow_id)
        preceding = [t for t in tasks if t.step_number < task.step_number]

        report_tasks = [
            ReportTask(
                task_id=t.task_id,
                type=t.task_type,
                output=t.output_data,
                status=t.status,
            )
            for t in preceding
        ]
        has_failures = any(t.status == TaskStatus.FAILED for t in report_tasks)
        report = ReportOutput(
            workflow_id=task.workflow_id,
            tasks=report_tasks,
            final_report=SOME_FAILED_REPORT if has_failures else ALL_SUCCEEDED_REPORT,
        )
        logger.info(
            f"Report for workflow {task.workflow_id} covers {len(report_tasks)} tasks"
            + (" with failures" if has_failures else "")
        )
        return report.model_dump(mode="json", by_alias=True)
