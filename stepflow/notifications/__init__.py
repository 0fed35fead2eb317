"""Notification sinks and factory."""

from __future__ import annotations

import os
from typing import Optional

from ..config import StepflowConfig, load_config
from .log import LoggingNotificationSink
from .memory import NullNotificationSink, RecordingNotificationSink
from .sink import Notification, NotificationSink


def get_sink(
    backend: Optional[str] = None, config: Optional[StepflowConfig] = None
) -> NotificationSink:
    """Factory function to get the configured notification sink."""

    config = config or load_config()
    backend = (
        backend
        or os.getenv("STEPFLOW_NOTIFICATIONS")
        or config.notifications.backend
    ).lower()

    if backend == "logging":
        return LoggingNotificationSink()
    elif backend == "null":
        return NullNotificationSink()
    elif backend == "memory":
        return RecordingNotificationSink()
    else:
        raise ValueError(f"Unsupported notification backend: {backend}")


__all__ = [
    "LoggingNotificationSink",
    "Notification",
    "NotificationSink",
    "NullNotificationSink",
    "RecordingNotificationSink",
    "get_sink",
]
