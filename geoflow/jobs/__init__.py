"""Job contract, registry and built-in jobs."""

from __future__ import annotations

from .base import Job, JobContext
from .geojson import GeoJSONValidationError, geodesic_area, validate_geometry
from .polygon_area import PolygonAreaJob
from .registry import JobRegistry, default_registry
from .report import ReportGenerationJob, ReportOutput, ReportTask

__all__ = [
    "Job",
    "JobContext",
    "JobRegistry",
    "default_registry",
    "PolygonAreaJob",
    "ReportGenerationJob",
    "ReportOutput",
    "ReportTask",
    "GeoJSONValidationError",
    "geodesic_area",
    "validate_geometry",
]
