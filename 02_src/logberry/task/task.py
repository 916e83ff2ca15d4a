"""Tasks: scoped units of work emitting structured events."""

import itertools
import sys
import threading
import weakref
from datetime import timedelta
from time import monotonic
from typing import TYPE_CHECKING, Any, NoReturn

from ..aggregator import ERROR_KEY, aggregate, aggregate_all, copy_value
from ..errors import LogberryError
from ..models import Event, EventClass, EventData, EventDataMap, Scalar, ScalarKind, event_tag

if TYPE_CHECKING:
    from ..root import IRoot

DURATION_KEY = "Duration"
CAUSE_KEY = "Cause"

_uids = itertools.count()
_uid_lock = threading.Lock()


def _next_uid() -> int:
    with _uid_lock:
        return next(_uids)


def _cause_data(cause: BaseException) -> EventData:
    """Tree describing ``cause`` and, for logberry errors, its chain."""
    if not isinstance(cause, LogberryError):
        tree, _ = copy_value(cause)
        return tree

    # Already logged; refer to it without repeating its fields.
    if cause.reported:
        return Scalar(cause.message)

    tree = aggregate(None, cause)
    if cause.cause is not None:
        tree[CAUSE_KEY] = _cause_data(cause.cause)
    return tree


def _mark_reported(err: BaseException | None) -> None:
    while isinstance(err, LogberryError) and not err.reported:
        err.reported = True
        err = err.cause


class Task:
    """A task or component: the source of log events.

    Data given at construction or through ``add_data`` is reported with
    every event the task emits. Terminal events (end, success and the
    error family) clock the task first, so a timed task reports its
    ``Duration``. ``add_data`` is not safe for concurrent use on the same
    task.
    """

    def __init__(
        self,
        root: "IRoot",
        activity: str,
        data: tuple = (),
        parent: "Task | None" = None,
        component: str | None = None,
    ):
        self.uid = _next_uid()
        self.root = root
        self.activity = activity
        self.parent_id = parent.uid if parent is not None else None
        self._parent = weakref.ref(parent) if parent is not None else None
        if component is None:
            component = parent.component if parent is not None else ""
        self.component = component
        self.data = aggregate_all(*data)
        self.muted = False
        self._started: float | None = None

    @property
    def parent(self) -> "Task | None":
        """The creating task, if it is still alive."""
        return self._parent() if self._parent is not None else None

    def __repr__(self) -> str:
        return f"<Task {self.uid} {self.component}:{self.activity!r}>"

    # Factories

    def task(self, activity: str, *data: Any) -> "Task":
        """Create a sub-task. No event is emitted."""
        return Task(self.root, activity, data, parent=self)

    def component(self, label: str, *data: Any) -> "Task":
        """Create a sub-component and emit its begin event."""
        return Task(self.root, label, data, parent=self, component=label).begin()

    def long_task(self, activity: str, *data: Any) -> "Task":
        """Create a timed sub-task and emit its begin event."""
        return self.task(activity, *data).start_timer().begin()

    # State

    def set_component(self, label: str) -> "Task":
        self.component = label
        return self

    def add_data(self, *data: Any) -> "Task":
        """Permanently attach data reported with every later event."""
        for value in data:
            aggregate(self.data, value)
        return self

    def mute(self) -> "Task":
        """Suppress every event of this task except errors."""
        self.muted = True
        return self

    def unmute(self) -> "Task":
        self.muted = False
        return self

    def start_timer(self) -> "Task":
        """Start timing the task; terminal events report the duration."""
        self._started = monotonic()
        return self

    time = start_timer

    def clock(self) -> timedelta:
        """Attach the elapsed time under ``Duration`` and return it."""
        if self._started is None:
            return timedelta(0)
        elapsed = monotonic() - self._started
        self.data[DURATION_KEY] = Scalar(elapsed, ScalarKind.FLOAT)
        return timedelta(seconds=elapsed)

    # Events

    def _data(self, data: tuple) -> EventDataMap:
        return aggregate_all(self.data, *data)

    def _emit(self, tag: EventClass | str, message: str, data: EventDataMap) -> Event | None:
        if self.muted and event_tag(tag) != EventClass.ERROR.value:
            return None
        return self.root.event(self, tag, message, data)

    def event(self, tag: EventClass | str, message: str, *data: Any) -> Event | None:
        """Emit an event with an arbitrary class tag."""
        return self._emit(tag, message, self._data(data))

    def info(self, message: str, *data: Any) -> Event | None:
        return self._emit(EventClass.INFO, message, self._data(data))

    def warning(self, message: str, *data: Any) -> Event | None:
        return self._emit(EventClass.WARNING, message, self._data(data))

    def ready(self, *data: Any) -> Event | None:
        return self._emit(EventClass.READY, f"{self.activity} ready", self._data(data))

    def stopped(self, *data: Any) -> Event | None:
        return self._emit(EventClass.STOPPED, f"{self.activity} stopped", self._data(data))

    def begin(self, *data: Any) -> "Task":
        self._emit(EventClass.BEGIN, f"{self.activity} begin", self._data(data))
        return self

    def end(self, *data: Any) -> Event | None:
        self.clock()
        return self._emit(EventClass.END, f"{self.activity} end", self._data(data))

    def success(self, *data: Any) -> None:
        self.clock()
        self._emit(EventClass.SUCCESS, f"{self.activity} success", self._data(data))

    def error(self, err: BaseException, *data: Any) -> LogberryError:
        """Report that the task failed because of ``err``.

        The returned error is located at the caller and wraps ``err``.
        """
        return self._fail(err, data)

    def wrap_error(self, message: str, err: BaseException, *data: Any) -> LogberryError:
        """Report that the task failed because ``message``, caused by ``err``."""
        sub = LogberryError(message, cause=err).locate(1)
        return self._fail(sub, data)

    def failure(self, message: str, *data: Any) -> LogberryError:
        """Report that the task failed because ``message``."""
        err = LogberryError(message, *data).locate(1)
        return self._fail(err, ())

    def _fail(self, cause: BaseException, data: tuple) -> LogberryError:
        self.clock()

        message = f"{self.activity} failed"
        err = LogberryError(message, cause=cause)
        err.data = self._data(data)
        err.locate(2)

        event_data = self._data(data)
        event_data[ERROR_KEY] = _cause_data(cause)
        self._emit(EventClass.ERROR, message, event_data)

        _mark_reported(err)
        return err

    def fatal(self, message: str, *data: Any, cause: BaseException | None = None) -> NoReturn:
        """Emit an error event, stop the root and exit the process."""
        event_data = self._data(data)
        if cause is not None:
            event_data[ERROR_KEY] = _cause_data(cause)
        self.root.event(self, EventClass.ERROR, message, event_data)
        _mark_reported(cause)
        self.root.stop()
        sys.exit(1)
