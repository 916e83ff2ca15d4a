"""Pytest configuration and fixtures."""

import sys
import threading
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


class RecordingOutput:
    """Output driver keeping every delivered event."""

    def __init__(self):
        self.events = []
        self.root = None
        self.attached = 0
        self.detached = 0
        self._lock = threading.Lock()

    def attach(self, root):
        self.root = root
        self.attached += 1

    def detach(self):
        self.root = None
        self.detached += 1

    def deliver(self, event):
        with self._lock:
            self.events.append(event)

    @property
    def messages(self):
        return [event.message for event in self.events]


class RecordingListener:
    """Error listener keeping every notified error."""

    def __init__(self):
        self.errors = []

    def notify(self, error):
        self.errors.append(error)


@pytest.fixture
def output():
    """Create a recording output driver."""
    return RecordingOutput()


@pytest.fixture
def listener():
    """Create a recording error listener."""
    return RecordingListener()


@pytest.fixture
def immediate_root(output, listener):
    """Create ImmediateRoot with recording driver and listener."""
    from logberry.root import ImmediateRoot

    root = ImmediateRoot()
    root.add_output_driver(output)
    root.add_error_listener(listener)
    return root


@pytest.fixture
def background_root(output, listener):
    """Create BackgroundRoot with recording driver and listener."""
    from logberry.root import BackgroundRoot

    root = BackgroundRoot(buffer=8)
    root.add_output_driver(output)
    root.add_error_listener(listener)
    yield root
    root.stop()


@pytest.fixture
def task(immediate_root):
    """Create a top level task on the immediate root."""
    return immediate_root.task("Test task")


@pytest.fixture
def default_root():
    """Isolate the process-wide default root."""
    from logberry import toplevel

    toplevel.reset()
    yield
    toplevel.reset()
