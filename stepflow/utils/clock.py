"""Time sources used by the execution controller."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Wall-clock timestamp for logs and start/end times."""

    def monotonic(self) -> float:
        """Seconds from an arbitrary origin, used to measure durations."""


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()
