"""Roots: dispatch events from tasks to output drivers."""

import queue
import threading
from datetime import datetime, timezone
from typing import Any, Protocol

from ..errors import LogberryError, wrap_error
from ..logging_config import get_logger
from ..models import Event, EventClass, EventDataMap, event_tag
from ..outputs import IErrorListener, IOutputDriver
from ..task import Task

logger = get_logger(__name__)


class IRoot(Protocol):
    """Interface between event generation and output.

    Every attached output driver receives each event, in a thread safe
    and receipt ordered fashion. Internal logging errors, e.g. failures
    to write to disk, are reported to attached error listeners.
    """

    def add_output_driver(self, driver: IOutputDriver) -> "IRoot":
        """Attach a driver and include it in event delivery."""
        ...

    def clear_output_drivers(self) -> "IRoot":
        """Remove and detach every driver."""
        ...

    def set_output_driver(self, driver: IOutputDriver) -> "IRoot":
        """Make ``driver`` the only output of this root."""
        ...

    def add_error_listener(self, listener: IErrorListener) -> "IRoot":
        """Include ``listener`` among those notified of internal errors."""
        ...

    def clear_error_listeners(self) -> "IRoot":
        """Remove every error listener."""
        ...

    def set_error_listener(self, listener: IErrorListener) -> "IRoot":
        """Make ``listener`` the only error listener of this root."""
        ...

    def task(self, activity: str, *data: Any) -> Task:
        """Create a top level task."""
        ...

    def component(self, label: str, *data: Any) -> Task:
        """Create a top level component and emit its begin event."""
        ...

    def internal_error(self, error: BaseException) -> None:
        """Report an internal logging error to the error listeners."""
        ...

    def event(self, task: Task, tag: EventClass | str, message: str, data: EventDataMap) -> Event:
        """Build an event for ``task`` and dispatch it to the drivers."""
        ...

    def stop(self) -> None:
        """Deliver every pending event and release resources."""
        ...


class _Root:
    """Driver and listener bookkeeping shared by both root models."""

    def __init__(self):
        self._lock = threading.RLock()
        self._drivers: tuple[IOutputDriver, ...] = ()
        self._listeners: tuple[IErrorListener, ...] = ()

    @property
    def output_drivers(self) -> tuple[IOutputDriver, ...]:
        return self._drivers

    @property
    def error_listeners(self) -> tuple[IErrorListener, ...]:
        return self._listeners

    def add_output_driver(self, driver: IOutputDriver) -> "_Root":
        # Attached first so the driver knows its root before any delivery.
        driver.attach(self)
        with self._lock:
            self._drivers = self._drivers + (driver,)
        return self

    def clear_output_drivers(self) -> "_Root":
        with self._lock:
            old, self._drivers = self._drivers, ()
        # Detached after removal so no event reaches a detached driver.
        for driver in old:
            driver.detach()
        return self

    def set_output_driver(self, driver: IOutputDriver) -> "_Root":
        self.clear_output_drivers()
        return self.add_output_driver(driver)

    def add_error_listener(self, listener: IErrorListener) -> "_Root":
        with self._lock:
            self._listeners = self._listeners + (listener,)
        return self

    def clear_error_listeners(self) -> "_Root":
        with self._lock:
            self._listeners = ()
        return self

    def set_error_listener(self, listener: IErrorListener) -> "_Root":
        with self._lock:
            self._listeners = (listener,)
        return self

    def task(self, activity: str, *data: Any) -> Task:
        return Task(self, activity, data)

    def component(self, label: str, *data: Any) -> Task:
        return Task(self, label, data, component=label).begin()

    def internal_error(self, error: BaseException) -> None:
        listeners = self._listeners
        if not listeners:
            logger.warning("Unreported internal logging error: %s", error)
            return
        for listener in listeners:
            try:
                listener.notify(error)
            except Exception:
                logger.exception("Error listener %r failed", listener)

    def event(self, task: Task, tag: EventClass | str, message: str, data: EventDataMap) -> Event:
        event = Event(
            task_id=task.uid,
            parent_id=task.parent_id,
            component=task.component,
            event=event_tag(tag),
            message=message,
            data=data,
            timestamp=datetime.now(timezone.utc),
        )
        self._dispatch(event)
        return event

    def stop(self) -> None:
        pass

    def _dispatch(self, event: Event) -> None:
        raise NotImplementedError

    def _fan_out(self, event: Event) -> None:
        for driver in self._drivers:
            try:
                driver.deliver(event)
            except Exception as exc:
                self.internal_error(
                    wrap_error("Output driver failed", exc, {"Driver": type(driver).__name__})
                )


class ImmediateRoot(_Root):
    """Root delivering each event in the emitting thread."""

    def _dispatch(self, event: Event) -> None:
        with self._lock:
            self._fan_out(event)


_STOP = object()


class BackgroundRoot(_Root):
    """Root delivering events from a dedicated worker thread.

    Events are queued in receipt order and pushed to the drivers by a
    single worker. ``stop`` must be called before the process exits,
    otherwise queued events may be lost; the root can also be used as a
    context manager.
    """

    def __init__(self, buffer: int = 256):
        super().__init__()
        self._queue: queue.Queue = queue.Queue(maxsize=max(buffer, 0))
        self._state_lock = threading.Lock()
        self._closed = False
        self._worker = threading.Thread(
            target=self._run,
            name="logberry-background-root",
            daemon=True,
        )
        self._worker.start()

    @property
    def stopped(self) -> bool:
        return self._closed

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                with self._lock:
                    self._fan_out(item)
            finally:
                self._queue.task_done()

    def _dispatch(self, event: Event) -> None:
        # Held while putting so stop() cannot enqueue its sentinel ahead of us.
        with self._state_lock:
            if not self._closed:
                self._queue.put(event)
                return
        self.internal_error(
            LogberryError(
                "Event emitted after root stopped",
                {"Task": event.task_id, "Event": event.event, "Message": event.message},
            )
        )

    def flush(self) -> None:
        """Block until every queued event has been delivered."""
        if self._worker.is_alive():
            self._queue.join()

    def stop(self) -> None:
        """Reject further events, drain the queue and join the worker."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        if self._worker is not threading.current_thread():
            self._worker.join()
        logger.debug("Background root stopped")

    def __enter__(self) -> "BackgroundRoot":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
