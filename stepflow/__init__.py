"""stepflow: step-by-step workflow execution with retries, pause and cancellation."""

from .config import StepflowConfig, load_config, load_workflow
from .errors import (
    InvalidLifecycleCall,
    StepCancelled,
    StepFailed,
    StepflowError,
    WorkflowFailed,
    WorkflowTimeout,
)
from .executors import (
    ExecutionContext,
    FunctionStepExecutor,
    SimulatedStepExecutor,
    StepExecutor,
)
from .lifecycle import WorkflowManager, run_workflow
from .models import (
    ExecutionStatus,
    LogEntry,
    LogLevel,
    StepDefinition,
    StepStatus,
    WorkflowConfig,
    WorkflowExecution,
    WorkflowStep,
)
from .notifications import get_sink
from .presets import PRESETS, get_preset
from .snapshot import ExecutionSnapshot

__version__ = "0.1.0"
__all__ = [
    "ExecutionContext",
    "ExecutionSnapshot",
    "ExecutionStatus",
    "FunctionStepExecutor",
    "InvalidLifecycleCall",
    "LogEntry",
    "LogLevel",
    "PRESETS",
    "SimulatedStepExecutor",
    "StepCancelled",
    "StepDefinition",
    "StepExecutor",
    "StepFailed",
    "StepStatus",
    "StepflowConfig",
    "StepflowError",
    "WorkflowConfig",
    "WorkflowExecution",
    "WorkflowFailed",
    "WorkflowManager",
    "WorkflowStep",
    "WorkflowTimeout",
    "get_preset",
    "get_sink",
    "load_config",
    "load_workflow",
    "run_workflow",
]
