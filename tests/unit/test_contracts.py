"""Tests for workflow definition contracts."""

import pytest

from geoflow.contracts import JobOutcome, TaskStatus, WorkflowDefinition
from geoflow.errors import WorkflowDefinitionError


def test_definition_accepts_camel_and_snake_case():
    definition = WorkflowDefinition.model_validate(
        {
            "name": "wf",
            "steps": [
                {"taskType": "area", "stepNumber": 1},
                {"task_type": "report", "step_number": 2, "depends_on": "area"},
            ],
        }
    )
    assert definition.steps[0].task_type == "area"
    assert definition.steps[1].depends_on == "area"


def test_prerequisite_and_dependent_partition_keeps_order():
    definition = WorkflowDefinition.model_validate(
        {
            "name": "wf",
            "steps": [
                {"taskType": "report", "stepNumber": 3, "dependsOn": "area"},
                {"taskType": "area", "stepNumber": 1},
                {"taskType": "notify", "stepNumber": 2},
            ],
        }
    )
    assert [s.task_type for s in definition.prerequisite_steps()] == ["area"]
    assert [s.task_type for s in definition.dependent_steps()] == ["report", "notify"]


def test_from_yaml(tmp_path):
    path = tmp_path / "wf.yml"
    path.write_text(
        """
name: "example_workflow"
steps:
  - taskType: "polygonArea"
    stepNumber: 1
  - taskType: "reportGeneration"
    stepNumber: 2
    dependsOn: "polygonArea"
"""
    )
    definition = WorkflowDefinition.from_yaml(path)
    assert definition.name == "example_workflow"
    assert len(definition.steps) == 2
    assert definition.steps[1].depends_on == "polygonArea"


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "name: wf\nsteps:\n  - taskType: area\n    stepNumber: 0\n",
        "name: wf\nsteps:\n  - stepNumber: 1\n",
        "name: [unclosed\n",
    ],
)
def test_from_yaml_rejects_invalid_documents(tmp_path, content):
    path = tmp_path / "wf.yml"
    path.write_text(content)
    with pytest.raises(WorkflowDefinitionError):
        WorkflowDefinition.from_yaml(path)


def test_from_yaml_missing_file(tmp_path):
    with pytest.raises(WorkflowDefinitionError):
        WorkflowDefinition.from_yaml(tmp_path / "nope.yml")


def test_job_outcome_constructors():
    ok = JobOutcome.success({"area": 1.0})
    assert ok.status == TaskStatus.COMPLETED
    assert ok.output == '{"area": 1.0}'

    failed = JobOutcome.failure("boom")
    assert failed.status == TaskStatus.FAILED
    assert failed.output == '{"error": "boom"}'


def test_job_outcome_must_be_terminal():
    with pytest.raises(ValueError):
        JobOutcome(status=TaskStatus.RUNNING, output="{}")


def test_task_status_terminal_flags():
    assert TaskStatus.COMPLETED.is_terminal
    assert TaskStatus.FAILED.is_terminal
    assert not TaskStatus.QUEUED.is_terminal
    assert not TaskStatus.RUNNING.is_terminal
