from __future__ import annotations

import json
import logging
from typing import Any

from ..constants import AREA_UNIT
from ..persistence.models import Task
from .base import Job, JobContext
from .geojson import GeoJSONValidationError, geodesic_area, validate_geometry

logger = logging.getLogger(__name__)


class PolygonAreaJob(Job):
    """Compute the area of the GeoJSON geometry carried in the task payload."""

    async def run(self, task: Task, context: JobContext) -> dict[str, Any]:
        if not task.payload:
            raise GeoJSONValidationError("GeoJSON is null or undefined")
        try:
            geometry = json.loads(task.payload)
        except json.JSONDecodeError as exc:
            raise GeoJSONValidationError(f"Payload is not valid JSON: {exc}") from exc

        validate_geometry(geometry)
        area = geodesic_area(geometry)
        logger.debug(f"Task {task.task_id}: {geometry['type']} area {area:.2f} {AREA_UNIT}")
        return {"area": area, "unit": AREA_UNIT}
