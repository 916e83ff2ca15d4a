"""Tests for output drivers and error listeners."""

import io
import json
import logging
from datetime import datetime, timedelta, timezone

import pytest

from logberry.errors import LogberryError
from logberry.logging_config import JSONFormatter
from logberry.models import Event, EventDataMap, Scalar, ScalarKind
from logberry.outputs import EventRecord, JSONOutput, LoggingErrorListener, TextOutput
from logberry.root import ImmediateRoot

STAMP = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def make_event(**overrides):
    fields = dict(
        task_id=3,
        parent_id=None,
        component="main",
        event="info",
        message="Hello",
        data=EventDataMap(z=Scalar(1, ScalarKind.INT), a=Scalar("x")),
        timestamp=STAMP,
    )
    fields.update(overrides)
    return Event(**fields)


class BrokenText(TextOutput):
    def format(self, event):
        raise RuntimeError("cannot format")


class TestTextOutput:
    """Tests for the text driver."""

    def test_columns(self):
        """Test the message, ids and data land in their columns."""
        stream = io.StringIO()
        out = TextOutput(stream, program="prog")
        out.deliver(make_event())

        line = stream.getvalue()
        assert line.endswith("\n")
        line = line.rstrip("\n")
        assert line[:80].rstrip() == "2024-01-02T03:04:05+00:00 prog " + "main".ljust(12) + " Hello"
        assert line[80:].startswith("info".rjust(16) + "  3:- ")
        assert line.endswith(' { a="x" z=1 }')

    def test_parent_and_no_data(self):
        """Test parent ids and trailing whitespace with empty data."""
        out = TextOutput(io.StringIO(), program="prog")
        line = out.format(make_event(parent_id=7, data=EventDataMap()))
        assert line.endswith(" 3:7")

    def test_long_message_pushes_columns(self):
        """Test long messages are never truncated."""
        out = TextOutput(io.StringIO(), program="prog")
        line = out.format(make_event(message="m" * 120))
        assert "m" * 120 in line
        assert line.endswith('{ a="x" z=1 }')

    def test_differential_time(self):
        """Test elapsed seconds replace the timestamp."""
        out = TextOutput(io.StringIO(), program="prog", differential_time=True)
        event = make_event(timestamp=out._start + timedelta(seconds=1.5))
        assert out.format(event).startswith("    1.500000 prog ")

    def test_write_failure_reported(self, listener):
        """Test write errors go to the root's error listeners."""
        stream = io.StringIO()
        stream.close()
        root = ImmediateRoot().add_error_listener(listener)
        root.add_output_driver(TextOutput(stream, program="prog"))

        root.task("Work").info("Hi")

        [error] = listener.errors
        assert error.message == "Could not write entry"
        assert isinstance(error.cause, ValueError)

    def test_format_failure_reported(self, listener):
        """Test format errors go to the root's error listeners."""
        root = ImmediateRoot().add_error_listener(listener)
        root.add_output_driver(BrokenText(io.StringIO(), program="prog"))
        root.task("Work").info("Hi")
        assert listener.errors[0].message == "Could not format entry"

    def test_unattached_failure_logged(self, caplog):
        """Test failures of a detached driver reach standard logging."""
        stream = io.StringIO()
        stream.close()
        with caplog.at_level(logging.ERROR, logger="logberry"):
            TextOutput(stream, program="prog").deliver(make_event())
        assert "Could not write entry" in caplog.text

    def test_attach_detach(self):
        """Test the driver tracks its root."""
        root = ImmediateRoot()
        out = TextOutput(io.StringIO())
        root.add_output_driver(out)
        assert out.root is root
        root.clear_output_drivers()
        assert out.root is None


class TestJSONOutput:
    """Tests for the JSON driver."""

    def test_one_object_per_line(self):
        """Test each event is one JSON line with ordered data."""
        stream = io.StringIO()
        out = JSONOutput(stream)
        out.deliver(make_event())
        out.deliver(make_event(message="Again", parent_id=1))

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["task_id"] == 3
        assert first["parent_id"] is None
        assert first["event"] == "info"
        assert list(first["data"]) == ["z", "a"]
        assert json.loads(lines[1])["parent_id"] == 1

    def test_round_trip(self):
        """Test records parse back to the same values."""
        event = make_event(data=EventDataMap(items=Scalar(True, ScalarKind.BOOL)))
        line = JSONOutput(io.StringIO()).format(event)
        record = EventRecord.model_validate_json(line)
        assert record == EventRecord.from_event(event)
        assert record.timestamp == STAMP

    def test_record_is_frozen(self):
        """Test records are immutable."""
        record = EventRecord.from_event(make_event())
        with pytest.raises(Exception):
            record.message = "changed"


class TestLoggingErrorListener:
    """Tests for the logging listener."""

    def test_logs_error(self, caplog):
        """Test notifications become ERROR records."""
        with caplog.at_level(logging.ERROR, logger="logberry.internal"):
            LoggingErrorListener().notify(RuntimeError("disk full"))
        [record] = caplog.records
        assert record.levelno == logging.ERROR
        assert "disk full" in record.getMessage()

    def test_error_data_as_context(self, caplog):
        """Test LogberryError data is attached and formatted as context."""
        error = LogberryError("Could not write entry", {"task": 4})
        with caplog.at_level(logging.ERROR, logger="logberry.internal"):
            LoggingErrorListener().notify(error)
        [record] = caplog.records
        assert record.context == {"task": 4}
        assert json.loads(JSONFormatter().format(record))["context"] == {"task": 4}

    def test_plain_error_has_no_context(self, caplog):
        """Test errors without data add no context to the JSON line."""
        with caplog.at_level(logging.ERROR, logger="logberry.internal"):
            LoggingErrorListener().notify(RuntimeError("disk full"))
        [record] = caplog.records
        assert "context" not in json.loads(JSONFormatter().format(record))
