from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_CANCEL_GRACE_PERIOD,
    DEFAULT_RETRY_BACKOFF_BASE,
    DEFAULT_RETRY_INITIAL_DELAY,
    DEFAULT_RETRY_JITTER,
    DEFAULT_RETRY_MAX_DELAY,
)
from .models import WorkflowConfig


class RetrySettings(BaseModel):
    """Backoff applied between automatic step retries (seconds)."""

    initial_delay: float = Field(default=DEFAULT_RETRY_INITIAL_DELAY, ge=0)
    backoff_base: float = Field(default=DEFAULT_RETRY_BACKOFF_BASE, ge=0)
    jitter: float = Field(default=DEFAULT_RETRY_JITTER, ge=0)
    max_delay: float = Field(default=DEFAULT_RETRY_MAX_DELAY, ge=0)


class NotificationSettings(BaseModel):
    """Notification sink selection."""

    backend: Literal["logging", "null", "memory"] = "logging"


class StepflowConfig(BaseModel):
    """Top-level engine configuration model."""

    retry: RetrySettings = RetrySettings()
    notifications: NotificationSettings = NotificationSettings()
    cancel_grace_period: Optional[float] = DEFAULT_CANCEL_GRACE_PERIOD
    log_level: str = "INFO"


def load_config(path: Optional[str] = None) -> StepflowConfig:
    """Load engine configuration from a YAML file.

    Args:
        path: Optional path to config file. Falls back to STEPFLOW_CONFIG env
            variable or 'stepflow.yaml' in the current directory.
    """

    config_path = path or os.getenv("STEPFLOW_CONFIG", "stepflow.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = StepflowConfig(**data)
    else:
        config = StepflowConfig()

    env_level = os.getenv("STEPFLOW_LOG_LEVEL")
    if env_level:
        config.log_level = env_level.upper()
    return config


def load_workflow(path: Union[str, Path]) -> WorkflowConfig:
    """Read a workflow template from YAML.

    Keys may be snake_case or the camelCase names used by JSON templates.
    """

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return WorkflowConfig.model_validate(data)
