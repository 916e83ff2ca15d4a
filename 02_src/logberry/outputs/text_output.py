"""Human-readable text output."""

import sys
from datetime import datetime, timezone
from typing import TextIO

from ..config import default_program
from ..models import Event
from .driver import StreamOutput


class TextOutput(StreamOutput):
    """Writes events in a structured but human readable form.

    Each line holds the timestamp, program, component and message, then
    from column ``id_offset`` the event class and ``task:parent`` ids, then
    from column ``data_offset`` the event data. The default offsets wrap
    well on either 80 column or very wide terminals.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        program: str | None = None,
        differential_time: bool = False,
        id_offset: int = 80,
        data_offset: int = 100,
    ):
        super().__init__(stream if stream is not None else sys.stdout)
        self.program = program or default_program()
        self.differential_time = differential_time
        self.id_offset = id_offset
        self.data_offset = data_offset
        self._start = datetime.now(timezone.utc)

    def format(self, event: Event) -> str:
        line = f"{self._stamp(event)} {self.program} {event.component:<12} {event.message} "
        line = line.ljust(self.id_offset)

        parent = "-" if event.parent_id is None else event.parent_id
        line += f"{event.event:>16} {event.task_id:>2}:{parent!s:<2}"
        line = line.ljust(self.data_offset)

        if event.data:
            line += event.data.text()
        return line.rstrip()

    def _stamp(self, event: Event) -> str:
        if self.differential_time:
            elapsed = (event.timestamp - self._start).total_seconds()
            return f"{elapsed:12.6f}"
        return event.timestamp.isoformat(timespec="seconds")
