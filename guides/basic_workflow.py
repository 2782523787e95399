"""Build the example workflow and drive it to completion in one process."""

import asyncio
import json
from pathlib import Path

from geoflow import TaskScheduler, WorkflowBuilder, default_registry, get_workflow_results
from geoflow.persistence import InMemoryWorkflowRepository

DEFINITION = Path(__file__).resolve().parents[1] / "geoflow" / "workflows" / "example_workflow.yml"

POLYGON = {
    "type": "Polygon",
    "coordinates": [
        [
            [-63.624885020050996, -10.311050368263523],
            [-63.624885020050996, -10.367865108370523],
            [-63.61278302732815, -10.367865108370523],
            [-63.61278302732815, -10.311050368263523],
            [-63.624885020050996, -10.311050368263523],
        ]
    ],
}


async def main():
    repository = InMemoryWorkflowRepository()
    registry = default_registry()

    builder = WorkflowBuilder(repository, registry)
    workflow = await builder.create_workflow_from_yaml(DEFINITION, "client-1", POLYGON)
    print(f"✅ Workflow created: {workflow.workflow_id}")

    scheduler = TaskScheduler(repository, registry, poll_interval=0.1)
    # Readiness is re-checked task by task, so the report step runs in the
    # same cycle as the area step it depends on.
    report = await scheduler.run_once()
    print(f"🔁 Cycle executed {report.executed}, skipped {report.skipped}")

    results = await get_workflow_results(repository, workflow.workflow_id)
    print(json.dumps(results.model_dump(mode="json", by_alias=True), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
