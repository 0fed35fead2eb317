"""In-process notification sinks."""

from __future__ import annotations

from typing import List

from ..models import LogLevel
from .sink import Notification, NotificationSink


class RecordingNotificationSink(NotificationSink):
    """Keep every notification in a list.

    Useful for tests and for UIs polling for new toasts.
    """

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def notify(self, level: LogLevel, title: str, message: str) -> None:
        self.notifications.append(
            Notification(level=LogLevel(level), title=title, message=message)
        )

    def titles(self) -> List[str]:
        return [n.title for n in self.notifications]


class NullNotificationSink(NotificationSink):
    """Discard all notifications."""

    def notify(self, level: LogLevel, title: str, message: str) -> None:
        pass
