"""Output driver and error listener contracts."""

from typing import TYPE_CHECKING, Protocol, TextIO

from ..errors import wrap_error
from ..logging_config import get_logger
from ..models import Event

if TYPE_CHECKING:
    from ..root import IRoot

logger = get_logger(__name__)


class IOutputDriver(Protocol):
    """Receives events from a Root to export them."""

    def attach(self, root: "IRoot") -> None:
        """Notify the driver of its Root. Called by the Root only."""
        ...

    def detach(self) -> None:
        """Notify the driver it has been removed from its Root."""
        ...

    def deliver(self, event: Event) -> None:
        """Export an event. The event is shared and must not be retained."""
        ...


class IErrorListener(Protocol):
    """Notified of internal logging errors, e.g. failures to write."""

    def notify(self, error: Exception) -> None:
        """Handle an internal error. Must not raise."""
        ...


class StreamOutput:
    """Base for drivers writing one line per event to a text stream."""

    def __init__(self, stream: TextIO):
        self._stream = stream
        self.root: "IRoot | None" = None

    def attach(self, root: "IRoot") -> None:
        self.root = root

    def detach(self) -> None:
        self.root = None

    def deliver(self, event: Event) -> None:
        try:
            line = self.format(event)
        except Exception as e:
            self._internal_error(wrap_error("Could not format entry", e, {"task": event.task_id}))
            return

        try:
            self._stream.write(line + "\n")
            self._stream.flush()
        except (OSError, ValueError) as e:
            self._internal_error(wrap_error("Could not write entry", e, {"task": event.task_id}))

    def format(self, event: Event) -> str:
        """Render ``event`` as a single line without the newline."""
        raise NotImplementedError

    def _internal_error(self, error: Exception) -> None:
        if self.root is None:
            logger.error("Output driver not attached: %s", error)
            return
        self.root.internal_error(error)
