"""Persistence layer for geoflow workflows and tasks."""

from __future__ import annotations

import os
from typing import Optional

from ..config import GeoflowConfig, load_config
from .inmemory import InMemoryWorkflowRepository
from .models import Task, Workflow
from .repository import WorkflowRepository
from .sqlite import SQLiteWorkflowRepository

_repository_instance: WorkflowRepository | None = None

_SQLMODEL_PREFIXES = (
    "sqlite+aiosqlite://",
    "postgres://",
    "postgresql://",
    "postgresql+asyncpg://",
)


def get_repository(
    database_url: Optional[str] = None, config: Optional[GeoflowConfig] = None
) -> WorkflowRepository:
    """Factory function to obtain a workflow repository.

    The repository backend is selected based on ``database_url`` which can be
    provided explicitly, via environment variable ``GEOFLOW_DATABASE_URL`` or
    ``DATABASE_URL``, or from loaded configuration. When no database is
    configured, an in-memory repository is returned.

    ``sqlite://<path>`` uses the stdlib SQLite backend; ``sqlite+aiosqlite://``
    and PostgreSQL URLs use the SQLModel backend.
    """

    global _repository_instance
    if _repository_instance is not None and database_url is None and config is None:
        return _repository_instance

    config = config or load_config()
    database_url = (
        database_url
        or os.getenv("GEOFLOW_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or getattr(config, "database_url", None)
    )

    if not database_url:
        _repository_instance = InMemoryWorkflowRepository()
        return _repository_instance

    if database_url.startswith("sqlite://"):
        path = database_url.replace("sqlite://", "", 1)
        _repository_instance = SQLiteWorkflowRepository(path)
    elif database_url.startswith(_SQLMODEL_PREFIXES):
        from ..db import SQLModelWorkflowRepository

        _repository_instance = SQLModelWorkflowRepository(database_url)
    else:
        raise ValueError(f"Unsupported database backend: {database_url}")

    return _repository_instance


__all__ = [
    "Task",
    "Workflow",
    "WorkflowRepository",
    "SQLiteWorkflowRepository",
    "InMemoryWorkflowRepository",
    "get_repository",
]
