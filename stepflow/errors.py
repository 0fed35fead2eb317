"""Exception types raised by stepflow."""

from __future__ import annotations

from typing import Optional


class StepflowError(Exception):
    """Base class for all stepflow errors."""


class StepFailed(StepflowError):
    """Raised by a step executor when an attempt fails.

    Any exception escaping an executor counts as a failed attempt; raising
    ``StepFailed`` lets the executor say whether a retry makes sense.
    """

    def __init__(self, message: str, retryable: bool = True) -> None:
        super().__init__(message)
        self.retryable = retryable


class StepCancelled(StepFailed):
    """Raised by an executor that observed the cancel signal."""

    def __init__(self, message: str = "Step cancelled") -> None:
        super().__init__(message, retryable=False)


class InvalidLifecycleCall(StepflowError):
    """A lifecycle operation was called while its precondition did not hold."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"Cannot {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class InvalidTransition(StepflowError):
    """A status change outside the allowed transition table."""

    def __init__(self, subject: str, current: str, target: str) -> None:
        super().__init__(f"Invalid transition for {subject}: {current} -> {target}")
        self.current = current
        self.target = target


class WorkflowFailed(StepflowError):
    """Reported to ``on_error`` when an execution ends in ``failed``."""

    def __init__(self, message: str, step_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.step_id = step_id


class WorkflowTimeout(WorkflowFailed):
    """The whole-workflow timeout elapsed."""
