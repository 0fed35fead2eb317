"""Notification sink abstraction for human-readable workflow events."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from pydantic import BaseModel, Field

from ..models import LogLevel


class Notification(BaseModel):
    """One event delivered to a sink."""

    level: LogLevel
    title: str
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationSink(Protocol):
    """Protocol for receivers of status and error events.

    ``notify`` is fire-and-forget: the engine calls it synchronously and
    never waits on any work it schedules.
    """

    def notify(self, level: LogLevel, title: str, message: str) -> None:
        """Deliver one event."""
