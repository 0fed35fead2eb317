import pytest

from stepflow import FunctionStepExecutor, StepDefinition, WorkflowConfig, WorkflowManager
from stepflow.config import NotificationSettings, RetrySettings, StepflowConfig
from stepflow.notifications import RecordingNotificationSink


@pytest.fixture
def settings() -> StepflowConfig:
    """Engine settings without backoff delays so retries run immediately."""
    return StepflowConfig(
        retry=RetrySettings(initial_delay=0, jitter=0),
        notifications=NotificationSettings(backend="memory"),
        cancel_grace_period=2.0,
    )


@pytest.fixture
def sink() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def make_workflow():
    """Build a workflow from step ids or ``StepDefinition`` objects."""

    def _make(*steps, **policy) -> WorkflowConfig:
        definitions = [
            step if isinstance(step, StepDefinition) else StepDefinition(id=step, name=step.upper())
            for step in steps
        ]
        return WorkflowConfig(id="wf", name="Test Workflow", steps=definitions, **policy)

    return _make


@pytest.fixture
def make_manager(settings, sink):
    def _make(config: WorkflowConfig, executor: FunctionStepExecutor, **kwargs) -> WorkflowManager:
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("sink", sink)
        return WorkflowManager(config, executor, **kwargs)

    return _make
