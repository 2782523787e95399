"""Shared constants."""

DEFAULT_POLL_INTERVAL = 5.0

POLYGON_AREA_TASK = "polygonArea"
REPORT_GENERATION_TASK = "reportGeneration"

AREA_UNIT = "square meters"

ALL_SUCCEEDED_REPORT = "All tasks completed successfully. Aggregated data is available."
SOME_FAILED_REPORT = "Some tasks failed. Review the task outputs for details."
