import json

import pytest

from geoflow.jobs import JobRegistry, PolygonAreaJob, ReportGenerationJob
from geoflow.persistence import InMemoryWorkflowRepository

SQUARE = {
    "type": "Polygon",
    "coordinates": [[[0, 0], [0, 1], [1, 1], [1, 0], [0, 0]]],
}


@pytest.fixture
def repo() -> InMemoryWorkflowRepository:
    return InMemoryWorkflowRepository()


@pytest.fixture
def registry() -> JobRegistry:
    registry = JobRegistry()
    registry.register("area", PolygonAreaJob())
    registry.register("report", ReportGenerationJob())
    return registry


@pytest.fixture
def square_payload() -> str:
    return json.dumps(SQUARE)
