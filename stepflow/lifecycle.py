"""Public lifecycle API for running a workflow."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from .config import StepflowConfig, load_config
from .controller import ExecutionController, WorkflowHooks
from .errors import InvalidLifecycleCall, WorkflowFailed
from .executors import StepExecutor
from .models import ExecutionStatus, StepStatus, WorkflowConfig, WorkflowStep
from .notifications import NotificationSink
from .snapshot import ExecutionSnapshot
from .utils.clock import Clock

logger = logging.getLogger(__name__)


class WorkflowManager:
    """Start, pause, resume, cancel and steer one execution of a workflow.

    Every call that finds the execution in the wrong state raises
    ``InvalidLifecycleCall`` and leaves the execution untouched.
    """

    def __init__(
        self,
        config: WorkflowConfig,
        executor: StepExecutor,
        *,
        settings: Optional[StepflowConfig] = None,
        sink: Optional[NotificationSink] = None,
        clock: Optional[Clock] = None,
        on_complete: Optional[Callable[[Dict[str, Any]], None]] = None,
        on_error: Optional[Callable[[WorkflowFailed], None]] = None,
        on_step_complete: Optional[Callable[[str, Any], None]] = None,
        on_step_error: Optional[Callable[[str, Exception], None]] = None,
    ) -> None:
        self.config = config
        self.settings = settings or load_config()
        self._controller = ExecutionController(
            config,
            executor,
            settings=self.settings,
            sink=sink,
            clock=clock,
            hooks=WorkflowHooks(
                on_complete=on_complete,
                on_error=on_error,
                on_step_complete=on_step_complete,
                on_step_error=on_step_error,
            ),
        )

    @classmethod
    async def launch(
        cls,
        config: WorkflowConfig,
        executor: StepExecutor,
        *,
        auto_start: Optional[bool] = None,
        **kwargs: Any,
    ) -> "WorkflowManager":
        """Build a manager and start it when ``auto_start`` (or the config's flag) is set."""
        manager = cls(config, executor, **kwargs)
        if config.auto_start if auto_start is None else auto_start:
            await manager.start()
        return manager

    @property
    def execution_id(self) -> str:
        return self._controller.execution.id

    @property
    def status(self) -> ExecutionStatus:
        return self._controller.execution.status

    def snapshot(self) -> ExecutionSnapshot:
        return self._controller.snapshot()

    async def start(self) -> None:
        async with self._controller.lock:
            self._require("start", ExecutionStatus.IDLE)
            self._controller.begin()
        logger.debug(f"Started {self.config.id} as {self.execution_id}")

    async def pause(self) -> None:
        """Stop at the next step boundary; an in-flight step is left to finish."""
        async with self._controller.lock:
            self._require("pause", ExecutionStatus.RUNNING)
            self._controller.pause()

    async def resume(self) -> None:
        async with self._controller.lock:
            self._require("resume", ExecutionStatus.PAUSED)
            self._controller.resume()

    async def cancel(self) -> bool:
        """Cancel the run and wait for in-flight steps to return.

        Cancellation is cooperative: executors see the cancel signal but are
        not interrupted. Waits at most ``settings.cancel_grace_period``
        seconds and returns ``False`` if steps were still running by then;
        their results are discarded whenever they arrive.
        """
        async with self._controller.lock:
            self._require("cancel", ExecutionStatus.RUNNING, ExecutionStatus.PAUSED)
            self._controller.cancel()
        return await self._controller.settle(self.settings.cancel_grace_period)

    async def retry_step(self, step_id: str) -> None:
        """Run a failed step again, once, without automatic retries or backoff."""
        async with self._controller.lock:
            step = self._get_step("retry step", step_id)
            self._require(
                "retry step", ExecutionStatus.RUNNING, ExecutionStatus.PAUSED
            )
            if step.status is not StepStatus.FAILED:
                raise InvalidLifecycleCall(
                    "retry step", f"step {step_id} is {step.status.value}, not failed"
                )
            if not self.config.allow_retry:
                raise InvalidLifecycleCall(
                    "retry step", f"workflow {self.config.id} does not allow retries"
                )
            self._controller.reset_step(step)

    async def skip_step(self, step_id: str) -> None:
        async with self._controller.lock:
            step = self._get_step("skip step", step_id)
            if self.status.is_terminal:
                raise InvalidLifecycleCall(
                    "skip step", f"workflow is {self.status.value}"
                )
            if step.status is not StepStatus.PENDING:
                raise InvalidLifecycleCall(
                    "skip step", f"step {step_id} is {step.status.value}, not pending"
                )
            if not step.optional:
                raise InvalidLifecycleCall("skip step", f"step {step_id} is not optional")
            if not self.config.allow_skip:
                raise InvalidLifecycleCall(
                    "skip step", f"workflow {self.config.id} does not allow skipping"
                )
            self._controller.skip(step)

    async def wait(self, timeout: Optional[float] = None) -> ExecutionSnapshot:
        """Wait until the run is terminal and no step is in flight.

        Raises ``asyncio.TimeoutError`` if ``timeout`` seconds pass first.
        A paused run does not finish until it is resumed or cancelled.
        """
        await self._controller.wait(timeout)
        return self.snapshot()

    def _require(self, operation: str, *allowed: ExecutionStatus) -> None:
        status = self.status
        if status not in allowed:
            expected = " or ".join(s.value for s in allowed)
            raise InvalidLifecycleCall(
                operation, f"workflow is {status.value}, expected {expected}"
            )

    def _get_step(self, operation: str, step_id: str) -> WorkflowStep:
        step = self._controller.execution.get_step(step_id)
        if step is None:
            raise InvalidLifecycleCall(operation, f"unknown step {step_id}")
        return step


async def run_workflow(
    config: WorkflowConfig,
    executor: StepExecutor,
    *,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> ExecutionSnapshot:
    """Start ``config`` with ``executor`` and return the final snapshot."""
    manager = WorkflowManager(config, executor, **kwargs)
    await manager.start()
    return await manager.wait(timeout)
