import logging

from stepflow.models import LogLevel
from stepflow.notifications import (
    LoggingNotificationSink,
    NullNotificationSink,
    RecordingNotificationSink,
)


def test_recording_sink_keeps_notifications():
    sink = RecordingNotificationSink()
    sink.notify(LogLevel.ERROR, "Workflow Error", "Step failed: Upload")
    sink.notify("info", "Workflow Complete", "done")

    assert sink.titles() == ["Workflow Error", "Workflow Complete"]
    assert sink.notifications[0].level is LogLevel.ERROR
    assert sink.notifications[1].level is LogLevel.INFO
    assert sink.notifications[0].message == "Step failed: Upload"


def test_logging_sink_maps_levels(caplog):
    sink = LoggingNotificationSink()
    with caplog.at_level(logging.INFO, logger="stepflow.notifications.log"):
        sink.notify(LogLevel.WARN, "Heads up", "slow step")
        sink.notify(LogLevel.ERROR, "Workflow Error", "boom")

    levels = [(r.levelno, r.getMessage()) for r in caplog.records]
    assert (logging.WARNING, "Heads up: slow step") in levels
    assert (logging.ERROR, "Workflow Error: boom") in levels


def test_null_sink_accepts_everything():
    NullNotificationSink().notify(LogLevel.INFO, "title", "message")
