"""Core data model for stepflow workflows and their executions."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_MAX_RETRIES


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"

    def can_transition(self, target: "StepStatus") -> bool:
        return target in STEP_TRANSITIONS[self]

    @property
    def is_settled(self) -> bool:
        """``True`` for statuses that count towards progress."""
        return self in (StepStatus.COMPLETED, StepStatus.SKIPPED)


class ExecutionStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    def can_transition(self, target: "ExecutionStatus") -> bool:
        return target in EXECUTION_TRANSITIONS[self]

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


class LogLevel(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


STEP_TRANSITIONS: Dict[StepStatus, frozenset] = {
    StepStatus.PENDING: frozenset({StepStatus.RUNNING, StepStatus.SKIPPED}),
    StepStatus.RUNNING: frozenset({StepStatus.COMPLETED, StepStatus.FAILED}),
    StepStatus.FAILED: frozenset({StepStatus.PENDING}),
    StepStatus.COMPLETED: frozenset(),
    StepStatus.SKIPPED: frozenset(),
}

EXECUTION_TRANSITIONS: Dict[ExecutionStatus, frozenset] = {
    ExecutionStatus.IDLE: frozenset({ExecutionStatus.RUNNING}),
    ExecutionStatus.RUNNING: frozenset(
        {
            ExecutionStatus.PAUSED,
            ExecutionStatus.COMPLETED,
            ExecutionStatus.FAILED,
            ExecutionStatus.CANCELLED,
        }
    ),
    ExecutionStatus.PAUSED: frozenset(
        {ExecutionStatus.RUNNING, ExecutionStatus.FAILED, ExecutionStatus.CANCELLED}
    ),
    ExecutionStatus.COMPLETED: frozenset(),
    ExecutionStatus.FAILED: frozenset(),
    ExecutionStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    {ExecutionStatus.COMPLETED, ExecutionStatus.FAILED, ExecutionStatus.CANCELLED}
)


class _Model(BaseModel):
    """Accepts both snake_case names and the camelCase template keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StepDefinition(_Model):
    """Static description of one step in a workflow template."""

    id: str
    name: str
    description: str = ""
    estimated_duration: Optional[int] = Field(
        default=None, ge=0, description="Expected run time in ms, display only"
    )
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    dependencies: List[str] = Field(default_factory=list)
    optional: bool = False


class WorkflowStep(StepDefinition):
    """A step together with its state inside one execution."""

    status: StepStatus = StepStatus.PENDING
    actual_duration: Optional[float] = None
    retry_count: int = 0
    error: Optional[str] = None
    data: Any = None

    @classmethod
    def from_definition(cls, definition: StepDefinition) -> "WorkflowStep":
        return cls(**definition.model_dump())


class WorkflowConfig(_Model):
    """Immutable workflow template: ordered steps plus execution policy."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str
    name: str
    description: str = ""
    steps: List[StepDefinition] = Field(default_factory=list)
    auto_start: bool = False
    allow_parallel: bool = False
    allow_retry: bool = True
    allow_skip: bool = False
    notifications: bool = True
    timeout: Optional[int] = Field(
        default=None, ge=0, description="Whole-workflow ceiling in ms, 0 disables"
    )

    @model_validator(mode="after")
    def _check_steps(self) -> "WorkflowConfig":
        seen: set[str] = set()
        for step in self.steps:
            if step.id in seen:
                raise ValueError(f"Duplicate step id: {step.id}")
            seen.add(step.id)

        for step in self.steps:
            for dep in step.dependencies:
                if dep == step.id:
                    raise ValueError(f"Step {step.id} depends on itself")
                if dep not in seen:
                    raise ValueError(f"Step {step.id} depends on unknown step {dep}")

        cycle = _find_cycle({s.id: s.dependencies for s in self.steps})
        if cycle:
            raise ValueError(f"Dependency cycle: {' -> '.join(cycle)}")
        return self

    @property
    def step_ids(self) -> List[str]:
        return [s.id for s in self.steps]

    @property
    def estimated_total_time(self) -> int:
        """Sum of the steps' estimated durations in ms."""
        return sum(s.estimated_duration or 0 for s in self.steps)

    def is_required(self, step: StepDefinition) -> bool:
        """Required steps must complete (or be skipped) for the run to complete."""
        return not (step.optional and self.allow_skip)


def _find_cycle(graph: Dict[str, List[str]]) -> Optional[List[str]]:
    visiting: set[str] = set()
    done: set[str] = set()
    path: List[str] = []

    def visit(node: str) -> Optional[List[str]]:
        visiting.add(node)
        path.append(node)
        for dep in graph.get(node, []):
            if dep in visiting:
                return path[path.index(dep) :] + [dep]
            if dep not in done:
                found = visit(dep)
                if found:
                    return found
        visiting.discard(node)
        done.add(node)
        path.pop()
        return None

    for node in graph:
        if node not in done:
            found = visit(node)
            if found:
                return found
    return None


class LogEntry(_Model):
    """One line of an execution's audit trail."""

    timestamp: datetime
    level: LogLevel
    message: str
    step_id: Optional[str] = None


class StepError(_Model):
    step_id: Optional[str] = None
    error: str
    timestamp: datetime


class WorkflowExecution(_Model):
    """Mutable state of one run of a ``WorkflowConfig``.

    Only the execution controller mutates an instance; observers get an
    ``ExecutionSnapshot`` instead.
    """

    id: str = Field(default_factory=lambda: f"exec_{uuid.uuid4().hex[:12]}")
    config_id: str
    status: ExecutionStatus = ExecutionStatus.IDLE
    current_step_id: Optional[str] = None
    progress: float = 0.0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    results: Dict[str, Any] = Field(default_factory=dict)
    errors: List[StepError] = Field(default_factory=list)
    logs: List[LogEntry] = Field(default_factory=list)
    steps: List[WorkflowStep] = Field(default_factory=list)

    @classmethod
    def from_config(cls, config: WorkflowConfig) -> "WorkflowExecution":
        return cls(
            config_id=config.id,
            steps=[WorkflowStep.from_definition(s) for s in config.steps],
        )

    def get_step(self, step_id: str) -> Optional[WorkflowStep]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None
