"""Core contracts for geoflow workflow definitions."""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import WorkflowDefinitionError

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class WorkflowStatus(str, Enum):
    INITIAL = "initial"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkflowStep(BaseModel):
    """Defines one step in a workflow."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    task_type: str = Field(alias="taskType", min_length=1)
    step_number: int = Field(alias="stepNumber", ge=1)
    depends_on: Optional[str] = Field(default=None, alias="dependsOn")


class WorkflowDefinition(BaseModel):
    """A named, ordered list of workflow steps."""

    name: str
    steps: List[WorkflowStep] = Field(default_factory=list)

    def dependency_targets(self) -> set[str]:
        """Return the task types named as ``dependsOn`` by any step."""
        return {step.depends_on for step in self.steps if step.depends_on}

    def prerequisite_steps(self) -> List[WorkflowStep]:
        """Steps that some other step depends on, in definition order."""
        targets = self.dependency_targets()
        return [step for step in self.steps if step.task_type in targets]

    def dependent_steps(self) -> List[WorkflowStep]:
        """Every step that is not a prerequisite, in definition order."""
        targets = self.dependency_targets()
        return [step for step in self.steps if step.task_type not in targets]

    @classmethod
    def from_yaml(cls, path: str | Path) -> "WorkflowDefinition":
        """Load and validate a definition from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise WorkflowDefinitionError(
                f"Could not read workflow definition {path}: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise WorkflowDefinitionError(
                f"Workflow definition {path} must be a mapping"
            )
        try:
            definition = cls.model_validate(data)
        except ValidationError as exc:
            raise WorkflowDefinitionError(
                f"Invalid workflow definition {path}: {exc}"
            ) from exc
        logger.debug(
            f"Loaded workflow definition {definition.name} with {len(definition.steps)} steps"
        )
        return definition


class JobOutcome(BaseModel):
    """Terminal status and serialized output produced by a job."""

    model_config = ConfigDict(frozen=True)

    status: TaskStatus
    output: str

    @field_validator("status")
    @classmethod
    def _ensure_terminal(cls, v: TaskStatus) -> TaskStatus:
        if not v.is_terminal:
            raise ValueError("job outcome status must be completed or failed")
        return v

    @classmethod
    def success(cls, data: Any) -> "JobOutcome":
        return cls(status=TaskStatus.COMPLETED, output=json.dumps(data))

    @classmethod
    def failure(cls, message: str) -> "JobOutcome":
        return cls(status=TaskStatus.FAILED, output=json.dumps({"error": message}))
