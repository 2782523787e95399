"""SQLite implementation of the workflow repository."""

from __future__ import annotations

import asyncio
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from ..contracts import TaskStatus, WorkflowStatus
from .models import Task, Workflow
from .repository import WorkflowRepository

_TASK_COLUMNS = (
    "task_id, workflow_id, client_id, task_type, step_number, status, payload, "
    "input, output, depends_on_id, created_at, started_at, completed_at"
)


def _ts(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SQLiteWorkflowRepository(WorkflowRepository):
    """Persist workflow state using SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS workflows (
                workflow_id TEXT PRIMARY KEY,
                client_id TEXT NOT NULL,
                name TEXT,
                status TEXT NOT NULL,
                final_result TEXT,
                created_at TEXT NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS tasks (
                task_id TEXT PRIMARY KEY,
                workflow_id TEXT NOT NULL REFERENCES workflows(workflow_id),
                client_id TEXT NOT NULL,
                task_type TEXT NOT NULL,
                step_number INTEGER NOT NULL,
                status TEXT NOT NULL,
                payload TEXT,
                input TEXT,
                output TEXT,
                depends_on_id TEXT REFERENCES tasks(task_id),
                created_at TEXT NOT NULL,
                started_at TEXT,
                completed_at TEXT
            )
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS ix_tasks_status_step ON tasks (status, step_number)"
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        self._conn.commit()

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchone()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchall()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            task_id=row["task_id"],
            workflow_id=row["workflow_id"],
            client_id=row["client_id"],
            task_type=row["task_type"],
            step_number=row["step_number"],
            status=TaskStatus(row["status"]),
            payload=row["payload"],
            input=row["input"],
            output=row["output"],
            depends_on_id=row["depends_on_id"],
            created_at=_parse_ts(row["created_at"]),
            started_at=_parse_ts(row["started_at"]),
            completed_at=_parse_ts(row["completed_at"]),
        )

    @staticmethod
    def _row_to_workflow(row: sqlite3.Row, tasks: list[Task] | None = None) -> Workflow:
        return Workflow(
            workflow_id=row["workflow_id"],
            client_id=row["client_id"],
            name=row["name"],
            status=WorkflowStatus(row["status"]),
            final_result=row["final_result"],
            created_at=_parse_ts(row["created_at"]),
            tasks=tasks or [],
        )

    # ------------------------------------------------------------------
    # Repository API
    async def save_workflow(self, workflow: Workflow) -> Workflow:
        if workflow.workflow_id is None:
            workflow.workflow_id = str(uuid.uuid4())
        await asyncio.to_thread(
            self._execute,
            """
            INSERT INTO workflows (workflow_id, client_id, name, status, final_result, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(workflow_id) DO UPDATE SET
                client_id = excluded.client_id,
                name = excluded.name,
                status = excluded.status,
                final_result = excluded.final_result
            """,
            workflow.workflow_id,
            workflow.client_id,
            workflow.name,
            workflow.status.value,
            workflow.final_result,
            _ts(workflow.created_at),
        )
        return workflow

    async def save_task(self, task: Task) -> Task:
        if task.task_id is None:
            task.task_id = str(uuid.uuid4())
        await asyncio.to_thread(
            self._execute,
            f"""
            INSERT INTO tasks ({_TASK_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(task_id) DO UPDATE SET
                status = excluded.status,
                input = excluded.input,
                output = excluded.output,
                depends_on_id = excluded.depends_on_id,
                started_at = excluded.started_at,
                completed_at = excluded.completed_at
            """,
            task.task_id,
            task.workflow_id,
            task.client_id,
            task.task_type,
            task.step_number,
            task.status.value,
            task.payload,
            task.input,
            task.output,
            task.depends_on_id,
            _ts(task.created_at),
            _ts(task.started_at),
            _ts(task.completed_at),
        )
        return task

    async def save_tasks(self, tasks: Sequence[Task]) -> list[Task]:
        return [await self.save_task(task) for task in tasks]

    async def find_tasks(
        self,
        *,
        status: TaskStatus | None = None,
        workflow_id: str | None = None,
    ) -> list[Task]:
        clauses: list[str] = []
        params: list[Any] = []
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if workflow_id is not None:
            clauses.append("workflow_id = ?")
            params.append(workflow_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = await asyncio.to_thread(
            self._fetchall,
            f"SELECT {_TASK_COLUMNS} FROM tasks {where} ORDER BY step_number, rowid",
            *params,
        )
        return [self._row_to_task(r) for r in rows]

    async def find_task(self, task_id: str) -> Task | None:
        row = await asyncio.to_thread(
            self._fetchone,
            f"SELECT {_TASK_COLUMNS} FROM tasks WHERE task_id = ?",
            task_id,
        )
        return self._row_to_task(row) if row else None

    async def find_workflow(self, workflow_id: str) -> Workflow | None:
        row = await asyncio.to_thread(
            self._fetchone,
            "SELECT workflow_id, client_id, name, status, final_result, created_at FROM workflows WHERE workflow_id = ?",
            workflow_id,
        )
        if not row:
            return None
        tasks = await self.find_tasks(workflow_id=workflow_id)
        return self._row_to_workflow(row, tasks)

    async def list_workflows(self) -> list[Workflow]:
        rows = await asyncio.to_thread(
            self._fetchall,
            "SELECT workflow_id, client_id, name, status, final_result, created_at FROM workflows ORDER BY created_at",
        )
        return [self._row_to_workflow(row) for row in rows]
