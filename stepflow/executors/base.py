"""Step executor interface: the work performed for one step attempt."""

from __future__ import annotations

import abc
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict

from ..models import WorkflowStep


@dataclass(frozen=True)
class ExecutionContext:
    """What an executor gets to know about the run it is part of."""

    execution_id: str
    config_id: str
    step_id: str
    attempt: int
    results: Dict[str, Any] = field(default_factory=dict)


class StepExecutor(metaclass=abc.ABCMeta):
    """Abstract base for the operation behind each workflow step."""

    @abc.abstractmethod
    async def execute(
        self,
        step: WorkflowStep,
        context: ExecutionContext,
        cancel_signal: asyncio.Event,
    ) -> Any:
        """Run one attempt of ``step`` and return its result payload.

        Raise to report a failed attempt (``StepFailed`` to control retries).
        Implementations should return or raise ``StepCancelled`` soon after
        ``cancel_signal`` is set.
        """
        raise NotImplementedError
