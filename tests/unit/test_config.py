"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from stepflow.config import load_config, load_workflow
from stepflow.notifications import (
    LoggingNotificationSink,
    NullNotificationSink,
    RecordingNotificationSink,
    get_sink,
)


def test_load_config_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "stepflow.yaml"
    config_path.write_text(
        """
retry:
  initial_delay: 0.25
  jitter: 0
notifications:
  backend: memory
cancel_grace_period: 1.5
"""
    )
    monkeypatch.setenv("STEPFLOW_CONFIG", str(config_path))

    config = load_config()
    assert config.retry.initial_delay == 0.25
    assert config.retry.jitter == 0
    assert config.retry.backoff_base == 1.5
    assert config.notifications.backend == "memory"
    assert config.cancel_grace_period == 1.5


def test_load_config_defaults_and_log_level_override(tmp_path, monkeypatch):
    monkeypatch.setenv("STEPFLOW_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("STEPFLOW_LOG_LEVEL", "debug")

    config = load_config()
    assert config.retry.initial_delay == 2.0
    assert config.notifications.backend == "logging"
    assert config.log_level == "DEBUG"


def test_get_sink_uses_config(tmp_path, monkeypatch):
    config_path = tmp_path / "stepflow.yaml"
    config_path.write_text("notifications:\n  backend: memory\n")
    monkeypatch.setenv("STEPFLOW_CONFIG", str(config_path))
    monkeypatch.delenv("STEPFLOW_NOTIFICATIONS", raising=False)

    assert isinstance(get_sink(), RecordingNotificationSink)
    assert isinstance(get_sink("null"), NullNotificationSink)
    assert isinstance(get_sink("LOGGING"), LoggingNotificationSink)
    monkeypatch.setenv("STEPFLOW_NOTIFICATIONS", "null")
    assert isinstance(get_sink(), NullNotificationSink)
    with pytest.raises(ValueError):
        get_sink("carrier-pigeon")


def test_load_workflow_yaml(tmp_path):
    path = tmp_path / "wf.yaml"
    path.write_text(
        """
id: nightly
name: Nightly Report
allowRetry: false
timeout: 60000
steps:
  - id: collect
    name: Collect
    estimatedDuration: 1500
  - id: report
    name: Report
    dependencies: [collect]
"""
    )
    workflow = load_workflow(path)
    assert workflow.id == "nightly"
    assert workflow.allow_retry is False
    assert workflow.timeout == 60000
    assert workflow.steps[1].dependencies == ["collect"]


def test_load_workflow_rejects_bad_dependencies(tmp_path):
    path = tmp_path / "wf.yaml"
    path.write_text(
        """
id: broken
name: Broken
steps:
  - id: report
    name: Report
    dependencies: [collect]
"""
    )
    with pytest.raises(ValidationError):
        load_workflow(path)
