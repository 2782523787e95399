from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, Text


class WorkflowRow(SQLModel, table=True):
    """Table row for a workflow instance."""

    __tablename__ = "workflows"

    workflow_id: str = Field(primary_key=True)
    client_id: str
    name: Optional[str] = None
    status: str = Field(default="initial")
    final_result: Optional[str] = Field(default=None, sa_column=Column(Text))
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))


class TaskRow(SQLModel, table=True):
    """Table row for a task; ``seq`` keeps insertion order for ties."""

    __tablename__ = "tasks"

    task_id: str = Field(primary_key=True)
    seq: Optional[int] = Field(default=None, index=True)
    workflow_id: str = Field(foreign_key="workflows.workflow_id", index=True)
    client_id: str
    task_type: str
    step_number: int = Field(index=True)
    status: str = Field(default="queued", index=True)
    payload: Optional[str] = Field(default=None, sa_column=Column(Text))
    input: Optional[str] = Field(default=None, sa_column=Column(Text))
    output: Optional[str] = Field(default=None, sa_column=Column(Text))
    depends_on_id: Optional[str] = Field(default=None, foreign_key="tasks.task_id")
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    started_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    completed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True)))
