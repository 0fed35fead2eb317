"""Executor dispatching steps to plain Python callables."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from ..errors import StepFailed
from ..models import WorkflowStep
from .base import ExecutionContext, StepExecutor

StepHandler = Callable[
    [WorkflowStep, ExecutionContext, asyncio.Event], Union[Any, Awaitable[Any]]
]


class FunctionStepExecutor(StepExecutor):
    """Run each step with the handler registered under its id.

    Handlers may be sync or async. Steps without a handler use ``default``
    or fail without retries.
    """

    def __init__(
        self,
        handlers: Optional[Dict[str, StepHandler]] = None,
        default: Optional[StepHandler] = None,
    ) -> None:
        self._handlers: Dict[str, StepHandler] = dict(handlers or {})
        self._default = default

    def register(self, step_id: str, handler: StepHandler) -> None:
        self._handlers[step_id] = handler

    async def execute(
        self,
        step: WorkflowStep,
        context: ExecutionContext,
        cancel_signal: asyncio.Event,
    ) -> Any:
        handler = self._handlers.get(step.id, self._default)
        if handler is None:
            raise StepFailed(f"No handler registered for step {step.id}", retryable=False)
        result = handler(step, context, cancel_signal)
        if inspect.isawaitable(result):
            result = await result
        return result
