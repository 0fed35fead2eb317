"""Executor that imitates real work with a delay and random failures."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Optional

from ..constants import DEFAULT_FAILURE_RATE, DEFAULT_SIMULATED_DURATION
from ..errors import StepCancelled, StepFailed
from ..models import WorkflowStep
from ..utils.retry import sleep_unless
from .base import ExecutionContext, StepExecutor

logger = logging.getLogger(__name__)


class SimulatedStepExecutor(StepExecutor):
    """Sleep for the step's estimated duration, then succeed or fail at random.

    Args:
        failure_rate: Probability in [0, 1] that an attempt fails.
        speed: Multiplier applied to the estimated duration.
        seed: Seed for the failure RNG, for reproducible runs.
    """

    def __init__(
        self,
        failure_rate: float = DEFAULT_FAILURE_RATE,
        speed: float = 1.0,
        seed: Optional[int] = None,
    ) -> None:
        if not 0 <= failure_rate <= 1:
            raise ValueError("failure_rate must be between 0 and 1")
        if speed < 0:
            raise ValueError("speed must not be negative")
        self.failure_rate = failure_rate
        self.speed = speed
        self._rng = random.Random(seed)

    async def execute(
        self,
        step: WorkflowStep,
        context: ExecutionContext,
        cancel_signal: asyncio.Event,
    ) -> Any:
        duration_ms = step.estimated_duration or DEFAULT_SIMULATED_DURATION
        delay = duration_ms * self.speed / 1000
        logger.debug(f"Simulating {step.id} for {delay:.3f}s (attempt {context.attempt})")

        if await sleep_unless(cancel_signal, delay):
            raise StepCancelled(f"{step.name} cancelled")

        if self._rng.random() < self.failure_rate:
            raise StepFailed(f"Failed to execute {step.name}")
        return {"success": True, "data": f"Step {step.name} completed"}
