"""Execution controller: drives one workflow run to a terminal state."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .config import StepflowConfig
from .errors import InvalidTransition, StepCancelled, WorkflowFailed, WorkflowTimeout
from .executors import ExecutionContext, StepExecutor
from .models import (
    ExecutionStatus,
    LogEntry,
    LogLevel,
    StepError,
    StepStatus,
    WorkflowConfig,
    WorkflowExecution,
    WorkflowStep,
)
from .notifications import NotificationSink, get_sink
from .snapshot import ExecutionSnapshot
from .utils.clock import Clock, SystemClock
from .utils.retry import compute_backoff, sleep_unless

logger = logging.getLogger(__name__)

_PY_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@dataclass
class WorkflowHooks:
    """Optional callbacks fired as the run progresses."""

    on_complete: Optional[Callable[[Dict[str, Any]], None]] = None
    on_error: Optional[Callable[[WorkflowFailed], None]] = None
    on_step_complete: Optional[Callable[[str, Any], None]] = None
    on_step_error: Optional[Callable[[str, Exception], None]] = None


class ExecutionController:
    """Owns a ``WorkflowExecution`` and is the only code that mutates it.

    Every mutation happens while holding ``lock``; the lifecycle API takes the
    same lock before calling the ``begin``/``pause``/``resume``/``cancel``/
    ``reset_step``/``skip`` primitives below. The executor call and backoff
    sleeps are the only awaits made without the lock.
    """

    def __init__(
        self,
        config: WorkflowConfig,
        executor: StepExecutor,
        *,
        settings: Optional[StepflowConfig] = None,
        sink: Optional[NotificationSink] = None,
        clock: Optional[Clock] = None,
        hooks: Optional[WorkflowHooks] = None,
    ) -> None:
        self.config = config
        self.settings = settings or StepflowConfig()
        self.execution = WorkflowExecution.from_config(config)
        self.lock = asyncio.Lock()
        self.cancel_signal = asyncio.Event()
        self._executor = executor
        self._sink = sink if sink is not None else get_sink(config=self.settings)
        self._clock = clock or SystemClock()
        self._hooks = hooks or WorkflowHooks()
        self._steps: Dict[str, WorkflowStep] = {s.id: s for s in self.execution.steps}
        self._attempts: Dict[str, int] = {s.id: 0 for s in self.execution.steps}
        self._manual_retries: set[str] = set()
        self._paused = False
        self._looping = False
        self._loop_task: Optional[asyncio.Task] = None
        self._watchdog_task: Optional[asyncio.Task] = None
        self._started_at: Optional[float] = None
        # set once the run is terminal, wakes backoff sleeps and the watchdog
        self._stopped = asyncio.Event()
        # set once the run is terminal and the loop has returned
        self._drained = asyncio.Event()

    # ------------------------------------------------------------------
    # lifecycle primitives, called with ``lock`` held

    def begin(self) -> None:
        self._set_status(ExecutionStatus.RUNNING)
        self.execution.start_time = self._clock.now()
        self._started_at = self._clock.monotonic()
        self._log(LogLevel.INFO, f"Starting workflow: {self.config.name}")
        if self.config.timeout:
            self._watchdog_task = asyncio.create_task(
                self._watch_deadline(self.config.timeout / 1000)
            )
        self.launch()

    def pause(self) -> None:
        self._paused = True
        self._set_status(ExecutionStatus.PAUSED)
        self._log(LogLevel.INFO, "Workflow paused")

    def resume(self) -> None:
        self._paused = False
        self._set_status(ExecutionStatus.RUNNING)
        self._log(LogLevel.INFO, "Workflow resumed")
        self.launch()

    def cancel(self) -> None:
        self._set_status(ExecutionStatus.CANCELLED)
        self.execution.end_time = self._now()
        self.cancel_signal.set()
        self._log(LogLevel.INFO, "Workflow cancelled by user")
        self._notify(
            LogLevel.INFO, "Workflow Cancelled", f"{self.config.name} was cancelled."
        )
        self._stop()

    def reset_step(self, step: WorkflowStep) -> None:
        self._set_step_status(step, StepStatus.PENDING)
        self._manual_retries.add(step.id)
        self._log(LogLevel.INFO, f"Manual retry requested: {step.name}", step.id)
        if self.execution.status is ExecutionStatus.RUNNING:
            self.launch()

    def skip(self, step: WorkflowStep) -> None:
        self._set_step_status(step, StepStatus.SKIPPED)
        self._log(LogLevel.INFO, f"Step skipped: {step.name}", step.id)
        self._update_progress()

    def launch(self) -> None:
        """Start the control loop unless one is still running."""
        if self._looping:
            return
        self._looping = True
        self._loop_task = asyncio.create_task(self._drive())

    # ------------------------------------------------------------------
    # observation

    def snapshot(self) -> ExecutionSnapshot:
        return ExecutionSnapshot.capture(self.config, self.execution, self._clock.now())

    async def wait(self, timeout: Optional[float] = None) -> None:
        await asyncio.wait_for(self._drained.wait(), timeout=timeout)

    async def settle(self, timeout: Optional[float]) -> bool:
        """Wait up to ``timeout`` seconds for in-flight steps to return."""
        task = self._loop_task
        if task is None or task.done():
            return True
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            logger.warning(
                f"[{self.execution.id}] in-flight steps still running after "
                f"{timeout}s; their results will be discarded"
            )
            return False
        return True

    # ------------------------------------------------------------------
    # control loop

    async def _drive(self) -> None:
        try:
            while True:
                async with self.lock:
                    if not self._may_proceed():
                        self._looping = False
                        return
                    self._enforce_deadline()
                    if self.execution.status.is_terminal:
                        self._looping = False
                        return
                    batch = self._next_batch()
                    if not batch:
                        self._finish()
                        self._looping = False
                        return

                if len(batch) == 1:
                    await self._run_step(batch[0])
                else:
                    await asyncio.gather(*(self._run_step(step) for step in batch))
        except Exception as exc:
            logger.exception(f"[{self.execution.id}] control loop crashed")
            async with self.lock:
                self._looping = False
                if not self.execution.status.is_terminal:
                    self._fail(WorkflowFailed(f"Internal error: {exc}"))
        finally:
            self._looping = False
            if self.execution.status.is_terminal:
                self._drained.set()

    async def _run_step(self, step: WorkflowStep) -> None:
        while True:
            async with self.lock:
                if not self._may_proceed() or step.status is not StepStatus.PENDING:
                    return
                self._enforce_deadline()
                if self.execution.status.is_terminal:
                    return

                manual = step.id in self._manual_retries
                self._manual_retries.discard(step.id)
                self._attempts[step.id] += 1
                attempt = self._attempts[step.id]

                self._set_step_status(step, StepStatus.RUNNING)
                self.execution.current_step_id = step.id
                suffix = f" (attempt {attempt})" if attempt > 1 else ""
                self._log(LogLevel.INFO, f"Executing step: {step.name}{suffix}", step.id)
                context = ExecutionContext(
                    execution_id=self.execution.id,
                    config_id=self.config.id,
                    step_id=step.id,
                    attempt=attempt,
                    results=dict(self.execution.results),
                )
                request = step.model_copy(deep=True)

            started = self._clock.monotonic()
            failure: Optional[Exception] = None
            data: Any = None
            try:
                data = await self._executor.execute(request, context, self.cancel_signal)
            except asyncio.CancelledError:
                task = asyncio.current_task()
                if task is not None and task.cancelling():
                    raise
                failure = StepCancelled(f"{step.name} cancelled")
            except Exception as exc:
                failure = exc
            elapsed = (self._clock.monotonic() - started) * 1000

            async with self.lock:
                self._enforce_deadline()
                if self.execution.status.is_terminal:
                    self._log(
                        LogLevel.WARN,
                        f"Discarded result of step {step.name}: workflow "
                        f"{self.execution.status.value}",
                        step.id,
                    )
                    return
                if failure is None:
                    self._complete_step(step, data, elapsed)
                    return
                delay = self._record_failure(step, failure, elapsed, manual)

            if delay is None or await sleep_unless(self._stopped, delay):
                return

    async def _watch_deadline(self, seconds: float) -> None:
        if await sleep_unless(self._stopped, seconds):
            return
        async with self.lock:
            self._enforce_deadline(force=True)

    # ------------------------------------------------------------------
    # state transitions

    def _may_proceed(self) -> bool:
        return not self._paused and self.execution.status is ExecutionStatus.RUNNING

    def _next_batch(self) -> List[WorkflowStep]:
        eligible = [
            step
            for step in self.execution.steps
            if step.status is StepStatus.PENDING
            and all(
                self._steps[dep].status is StepStatus.COMPLETED
                for dep in step.dependencies
            )
        ]
        if self.config.allow_parallel:
            return eligible
        return eligible[:1]

    def _complete_step(self, step: WorkflowStep, data: Any, elapsed: float) -> None:
        step.actual_duration = elapsed
        step.data = data
        step.error = None
        self._set_step_status(step, StepStatus.COMPLETED)
        self.execution.results[step.id] = data
        self._log(LogLevel.INFO, f"Step completed: {step.name}", step.id)
        self._update_progress()
        self._call_hook("on_step_complete", step.id, data)

    def _record_failure(
        self, step: WorkflowStep, exc: Exception, elapsed: float, manual: bool
    ) -> Optional[float]:
        """Apply retry policy to a failed attempt.

        Returns the backoff delay in seconds when the step will be retried.
        """
        message = str(exc) or exc.__class__.__name__
        step.actual_duration = elapsed
        step.error = message
        self._set_step_status(step, StepStatus.FAILED)
        self.execution.errors.append(
            StepError(step_id=step.id, error=message, timestamp=self._now())
        )
        self._log(LogLevel.ERROR, f"Step failed: {step.name} - {message}", step.id)
        self._call_hook("on_step_error", step.id, exc)

        retryable = getattr(exc, "retryable", True)
        if (
            self.config.allow_retry
            and retryable
            and not manual
            and step.retry_count < step.max_retries
        ):
            step.retry_count += 1
            self._set_step_status(step, StepStatus.PENDING)
            self._log(
                LogLevel.WARN,
                f"Retrying step: {step.name} (retry {step.retry_count} of {step.max_retries})",
                step.id,
            )
            retry = self.settings.retry
            return compute_backoff(
                step.retry_count,
                base=retry.backoff_base,
                jitter=retry.jitter,
                initial=retry.initial_delay,
                cap=retry.max_delay,
            )

        attempts = self._attempts[step.id]
        if self.config.is_required(step):
            self._fail(
                WorkflowFailed(
                    f"Step {step.name} failed after {attempts} attempt(s): {message}",
                    step_id=step.id,
                )
            )
        else:
            self._log(
                LogLevel.WARN,
                f"Optional step {step.name} failed after {attempts} attempt(s); continuing",
                step.id,
            )
        return None

    def _finish(self) -> None:
        unsettled = [
            step
            for step in self.execution.steps
            if self.config.is_required(step) and not step.status.is_settled
        ]
        if unsettled:
            ids = ", ".join(step.id for step in unsettled)
            self._fail(
                WorkflowFailed(
                    f"No eligible steps remain; unsatisfiable dependencies for: {ids}",
                    step_id=unsettled[0].id,
                )
            )
            return

        self._set_status(ExecutionStatus.COMPLETED)
        self.execution.progress = 100.0
        self.execution.end_time = self._now()
        self._log(LogLevel.INFO, "Workflow completed successfully")
        self._notify(
            LogLevel.INFO,
            "Workflow Complete",
            f"{self.config.name} has been completed successfully.",
        )
        self._stop()
        self._call_hook("on_complete", dict(self.execution.results))

    def _enforce_deadline(self, force: bool = False) -> None:
        if self.execution.status.is_terminal or not self.config.timeout:
            return
        if self._started_at is None:
            return
        elapsed = (self._clock.monotonic() - self._started_at) * 1000
        if not force and elapsed <= self.config.timeout:
            return
        error = WorkflowTimeout(
            f"Workflow timed out after {self.config.timeout}ms",
            step_id=self.execution.current_step_id,
        )
        self.execution.errors.append(
            StepError(step_id=None, error=str(error), timestamp=self._now())
        )
        self._fail(error)

    def _fail(self, error: WorkflowFailed) -> None:
        self._set_status(ExecutionStatus.FAILED)
        self.execution.end_time = self._now()
        self._log(LogLevel.ERROR, f"Workflow failed: {error}", error.step_id)
        self._stop()
        self._call_hook("on_error", error)

    def _stop(self) -> None:
        self._stopped.set()
        if not self._looping:
            self._drained.set()

    def _update_progress(self) -> None:
        total = len(self.execution.steps)
        if not total:
            return
        settled = sum(1 for step in self.execution.steps if step.status.is_settled)
        self.execution.progress = max(self.execution.progress, settled / total * 100)

    def _set_status(self, target: ExecutionStatus) -> None:
        current = self.execution.status
        if not current.can_transition(target):
            raise InvalidTransition(
                f"execution {self.execution.id}", current.value, target.value
            )
        self.execution.status = target

    def _set_step_status(self, step: WorkflowStep, target: StepStatus) -> None:
        if not step.status.can_transition(target):
            raise InvalidTransition(f"step {step.id}", step.status.value, target.value)
        step.status = target

    # ------------------------------------------------------------------
    # side channels

    def _now(self):
        now = self._clock.now()
        logs = self.execution.logs
        if logs and now < logs[-1].timestamp:
            return logs[-1].timestamp
        return now

    def _log(self, level: LogLevel, message: str, step_id: Optional[str] = None) -> None:
        self.execution.logs.append(
            LogEntry(timestamp=self._now(), level=level, message=message, step_id=step_id)
        )
        logger.log(_PY_LEVELS[level], f"[{self.execution.id}] {message}")
        if level is LogLevel.ERROR:
            self._notify(LogLevel.ERROR, "Workflow Error", message)

    def _notify(self, level: LogLevel, title: str, message: str) -> None:
        if not self.config.notifications:
            return
        try:
            self._sink.notify(level, title, message)
        except Exception:
            logger.exception(f"[{self.execution.id}] notification sink raised")

    def _call_hook(self, name: str, *args: Any) -> None:
        callback = getattr(self._hooks, name)
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception(f"[{self.execution.id}] {name} hook raised")
