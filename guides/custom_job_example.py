"""Register a custom job and run it behind the built-in area job."""

import asyncio

from geoflow import (
    Job,
    TaskScheduler,
    WorkflowBuilder,
    WorkflowDefinition,
    default_registry,
    get_workflow_status,
)
from geoflow.persistence import SQLiteWorkflowRepository


class HectaresJob(Job):
    """Convert the area computed by the step this task depends on."""

    async def run(self, task, context):
        area = task.input_data["area"]
        return {"hectares": area / 10_000}


async def main():
    repository = SQLiteWorkflowRepository("geoflow_example.db")
    registry = default_registry()
    registry.register("hectares", HectaresJob())

    definition = WorkflowDefinition.model_validate(
        {
            "name": "hectares",
            "steps": [
                {"taskType": "polygonArea", "stepNumber": 1},
                {"taskType": "hectares", "stepNumber": 2, "dependsOn": "polygonArea"},
                {"taskType": "reportGeneration", "stepNumber": 3},
            ],
        }
    )
    payload = {
        "type": "Polygon",
        "coordinates": [[[0, 0], [0, 0.01], [0.01, 0.01], [0.01, 0], [0, 0]]],
    }
    workflow = await WorkflowBuilder(repository, registry).create_workflow(
        definition, "client-1", payload
    )

    scheduler = TaskScheduler(repository, registry, poll_interval=0.2)
    await scheduler.start(max_cycles=3)

    status = await get_workflow_status(repository, workflow.workflow_id)
    print(f"📋 {status.model_dump_json(by_alias=True)}")


if __name__ == "__main__":
    asyncio.run(main())
