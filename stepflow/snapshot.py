"""Read-only, point-in-time views of an execution."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from .models import (
    ExecutionStatus,
    LogEntry,
    StepError,
    StepStatus,
    WorkflowConfig,
    WorkflowExecution,
    WorkflowStep,
)


class ExecutionSnapshot(BaseModel):
    """Deep copy of a ``WorkflowExecution`` taken at ``taken_at``.

    The snapshot owns its copy: changing anything reachable from it has no
    effect on the running workflow.
    """

    model_config = ConfigDict(frozen=True)

    workflow: WorkflowConfig
    execution: WorkflowExecution
    taken_at: datetime

    @classmethod
    def capture(
        cls, config: WorkflowConfig, execution: WorkflowExecution, taken_at: datetime
    ) -> "ExecutionSnapshot":
        return cls(
            workflow=config,
            execution=execution.model_copy(deep=True),
            taken_at=taken_at,
        )

    @property
    def id(self) -> str:
        return self.execution.id

    @property
    def status(self) -> ExecutionStatus:
        return self.execution.status

    @property
    def progress(self) -> float:
        return self.execution.progress

    @property
    def percent_complete(self) -> int:
        return int(round(self.execution.progress))

    @property
    def is_terminal(self) -> bool:
        return self.execution.status.is_terminal

    @property
    def results(self) -> Dict[str, Any]:
        return self.execution.results

    @property
    def logs(self) -> List[LogEntry]:
        return self.execution.logs

    @property
    def errors(self) -> List[StepError]:
        return self.execution.errors

    @property
    def steps(self) -> List[WorkflowStep]:
        return self.execution.steps

    @property
    def elapsed(self) -> float:
        """Milliseconds since start, up to ``end_time`` once terminal."""
        start = self.execution.start_time
        if start is None:
            return 0.0
        end = self.execution.end_time or self.taken_at
        return max((end - start).total_seconds() * 1000, 0.0)

    @property
    def estimated_total_time(self) -> int:
        return self.workflow.estimated_total_time

    def step(self, step_id: str) -> Optional[WorkflowStep]:
        return self.execution.get_step(step_id)

    def steps_with_status(self, status: StepStatus) -> List[WorkflowStep]:
        return [s for s in self.execution.steps if s.status is status]

    def current_step(self) -> Optional[WorkflowStep]:
        """The step most recently started, if any."""
        if self.execution.current_step_id is None:
            return None
        return self.execution.get_step(self.execution.current_step_id)

    def recent_logs(self, n: int = 10) -> List[LogEntry]:
        if n <= 0:
            return []
        return self.execution.logs[-n:]

    def failures_so_far(self) -> List[StepError]:
        return list(self.execution.errors)
