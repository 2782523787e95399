from .models import TaskRow, WorkflowRow
from .repository import SQLModelWorkflowRepository, normalize_database_url

__all__ = [
    "TaskRow",
    "WorkflowRow",
    "SQLModelWorkflowRepository",
    "normalize_database_url",
]
