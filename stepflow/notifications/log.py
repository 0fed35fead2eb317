"""Notification sink that writes to the standard logger."""

from __future__ import annotations

import logging

from ..models import LogLevel
from .sink import NotificationSink

logger = logging.getLogger(__name__)

_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class LoggingNotificationSink(NotificationSink):
    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def notify(self, level: LogLevel, title: str, message: str) -> None:
        self._log.log(_LEVELS[LogLevel(level)], f"{title}: {message}")
