"""Step executors."""

from __future__ import annotations

from .base import ExecutionContext, StepExecutor
from .function import FunctionStepExecutor, StepHandler
from .simulated import SimulatedStepExecutor

__all__ = [
    "ExecutionContext",
    "FunctionStepExecutor",
    "SimulatedStepExecutor",
    "StepExecutor",
    "StepHandler",
]
