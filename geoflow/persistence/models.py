"""Data models for persisted workflow state."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..contracts import JobOutcome, TaskStatus, WorkflowStatus
from ..errors import TaskStateError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _loads(value: Optional[str]) -> Any:
    return json.loads(value) if value else None


class Task(BaseModel):
    """A unit of work belonging to exactly one workflow."""

    task_id: Optional[str] = None
    workflow_id: str
    client_id: str
    task_type: str
    step_number: int = Field(ge=1)
    status: TaskStatus = TaskStatus.QUEUED
    payload: Optional[str] = None
    input: Optional[str] = None
    output: Optional[str] = None
    depends_on_id: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def payload_data(self) -> Any:
        return _loads(self.payload)

    @property
    def input_data(self) -> Any:
        return _loads(self.input)

    @property
    def output_data(self) -> Any:
        return _loads(self.output)

    def mark_running(self) -> None:
        """Move a queued task to ``running``."""
        if self.status != TaskStatus.QUEUED:
            raise TaskStateError(
                f"Task {self.task_id} cannot start from status {self.status.value}"
            )
        self.status = TaskStatus.RUNNING
        self.started_at = _utcnow()

    def finish(self, outcome: JobOutcome) -> None:
        """Record the terminal status and output. Allowed once per task."""
        if self.is_terminal:
            raise TaskStateError(
                f"Task {self.task_id} is already {self.status.value}; output is immutable"
            )
        self.status = outcome.status
        self.output = outcome.output
        self.completed_at = _utcnow()


class Workflow(BaseModel):
    """Persisted workflow instance data."""

    workflow_id: Optional[str] = None
    client_id: str
    name: Optional[str] = None
    status: WorkflowStatus = WorkflowStatus.INITIAL
    final_result: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    tasks: list[Task] = Field(default_factory=list)

    @property
    def completed_tasks(self) -> int:
        return sum(1 for task in self.tasks if task.status == TaskStatus.COMPLETED)
