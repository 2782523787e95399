from __future__ import annotations

import os
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_POLL_INTERVAL


class SchedulerConfig(BaseModel):
    """Configuration for the polling scheduler."""

    model_config = ConfigDict(validate_assignment=True)

    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    task_delay: float = Field(default=0.0, ge=0)
    task_timeout: Optional[float] = Field(default=None, gt=0)


class GeoflowConfig(BaseModel):
    """Top-level configuration model."""

    database_url: Optional[str] = None
    scheduler: SchedulerConfig = SchedulerConfig()
    log_level: str = "INFO"


def load_config(path: Optional[str] = None) -> GeoflowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to GEOFLOW_CONFIG env
            variable or 'geoflow.yaml' in the current directory.
    """

    config_path = path or os.getenv("GEOFLOW_CONFIG", "geoflow.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = GeoflowConfig(**data)
    else:
        config = GeoflowConfig()

    env_db_url = os.getenv("GEOFLOW_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url

    env_poll_interval = os.getenv("GEOFLOW_POLL_INTERVAL")
    if env_poll_interval:
        config.scheduler.poll_interval = env_poll_interval
    return config
