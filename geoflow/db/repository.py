from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Sequence
import uuid

from sqlalchemy import func
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..contracts import TaskStatus, WorkflowStatus
from ..persistence.models import Task, Workflow
from ..persistence.repository import WorkflowRepository
from .models import TaskRow, WorkflowRow


def normalize_database_url(database_url: str) -> str:
    """Map plain ``postgres://`` URLs onto the asyncpg driver."""
    for prefix in ("postgres://", "postgresql://"):
        if database_url.startswith(prefix):
            return "postgresql+asyncpg://" + database_url[len(prefix):]
    return database_url


class SQLModelWorkflowRepository(WorkflowRepository):
    """Async SQLModel repository for any SQLAlchemy async driver.

    Works with ``sqlite+aiosqlite://`` and ``postgresql+asyncpg://`` URLs.
    Tables are created on first use.
    """

    def __init__(self, database_url: str) -> None:
        self.database_url = normalize_database_url(database_url)
        connect_args = (
            {"check_same_thread": False}
            if self.database_url.startswith("sqlite")
            else {}
        )
        self.engine = create_async_engine(
            self.database_url, echo=False, future=True, connect_args=connect_args
        )
        self._initialized = False

    async def init_db(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        self._initialized = True

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if not self._initialized:
            await self.init_db()
        async with AsyncSession(self.engine, expire_on_commit=False) as session:
            yield session

    # ------------------------------------------------------------------
    @staticmethod
    def _to_task(row: TaskRow) -> Task:
        return Task(
            task_id=row.task_id,
            workflow_id=row.workflow_id,
            client_id=row.client_id,
            task_type=row.task_type,
            step_number=row.step_number,
            status=TaskStatus(row.status),
            payload=row.payload,
            input=row.input,
            output=row.output,
            depends_on_id=row.depends_on_id,
            created_at=row.created_at,
            started_at=row.started_at,
            completed_at=row.completed_at,
        )

    @staticmethod
    def _to_workflow(row: WorkflowRow, tasks: list[Task] | None = None) -> Workflow:
        return Workflow(
            workflow_id=row.workflow_id,
            client_id=row.client_id,
            name=row.name,
            status=WorkflowStatus(row.status),
            final_result=row.final_result,
            created_at=row.created_at,
            tasks=tasks or [],
        )

    async def _upsert_task(self, session: AsyncSession, task: Task) -> None:
        if task.task_id is None:
            task.task_id = str(uuid.uuid4())
        row = await session.get(TaskRow, task.task_id)
        if row is None:
            last_seq = (await session.exec(select(func.max(TaskRow.seq)))).one()
            row = TaskRow(
                task_id=task.task_id,
                seq=(last_seq or 0) + 1,
                workflow_id=task.workflow_id,
                client_id=task.client_id,
                task_type=task.task_type,
                step_number=task.step_number,
                payload=task.payload,
                created_at=task.created_at,
            )
        row.status = task.status.value
        row.input = task.input
        row.output = task.output
        row.depends_on_id = task.depends_on_id
        row.started_at = task.started_at
        row.completed_at = task.completed_at
        session.add(row)
        # flush so the next seq lookup in the same session sees this row
        await session.flush()

    # ------------------------------------------------------------------
    async def save_workflow(self, workflow: Workflow) -> Workflow:
        if workflow.workflow_id is None:
            workflow.workflow_id = str(uuid.uuid4())
        async with self.session() as session:
            row = await session.get(WorkflowRow, workflow.workflow_id)
            if row is None:
                row = WorkflowRow(
                    workflow_id=workflow.workflow_id,
                    client_id=workflow.client_id,
                    created_at=workflow.created_at,
                )
            row.name = workflow.name
            row.status = workflow.status.value
            row.final_result = workflow.final_result
            session.add(row)
            await session.commit()
        return workflow

    async def save_task(self, task: Task) -> Task:
        async with self.session() as session:
            await self._upsert_task(session, task)
            await session.commit()
        return task

    async def save_tasks(self, tasks: Sequence[Task]) -> list[Task]:
        async with self.session() as session:
            for task in tasks:
                await self._upsert_task(session, task)
            await session.commit()
        return list(tasks)

    async def find_tasks(
        self,
        *,
        status: TaskStatus | None = None,
        workflow_id: str | None = None,
    ) -> list[Task]:
        statement = select(TaskRow)
        if status is not None:
            statement = statement.where(TaskRow.status == status.value)
        if workflow_id is not None:
            statement = statement.where(TaskRow.workflow_id == workflow_id)
        statement = statement.order_by(TaskRow.step_number, TaskRow.seq)
        async with self.session() as session:
            rows = (await session.exec(statement)).all()
        return [self._to_task(row) for row in rows]

    async def find_task(self, task_id: str) -> Task | None:
        async with self.session() as session:
            row = await session.get(TaskRow, task_id)
        return self._to_task(row) if row else None

    async def find_workflow(self, workflow_id: str) -> Workflow | None:
        async with self.session() as session:
            row = await session.get(WorkflowRow, workflow_id)
        if row is None:
            return None
        tasks = await self.find_tasks(workflow_id=workflow_id)
        return self._to_workflow(row, tasks)

    async def list_workflows(self) -> list[Workflow]:
        async with self.session() as session:
            rows = (
                await session.exec(select(WorkflowRow).order_by(WorkflowRow.created_at))
            ).all()
        return [self._to_workflow(row) for row in rows]
