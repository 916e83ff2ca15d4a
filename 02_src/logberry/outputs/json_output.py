"""JSON lines output."""

import sys
from datetime import datetime
from typing import Any, TextIO

from pydantic import BaseModel, ConfigDict

from ..models import Event
from .driver import StreamOutput


class EventRecord(BaseModel):
    """Serialized form of an event."""

    model_config = ConfigDict(frozen=True)

    task_id: int
    parent_id: int | None = None
    component: str
    event: str
    message: str
    data: dict[str, Any]
    timestamp: datetime

    @classmethod
    def from_event(cls, event: Event) -> "EventRecord":
        """Build a record from an event, keeping data insertion order."""
        return cls(
            task_id=event.task_id,
            parent_id=event.parent_id,
            component=event.component,
            event=event.event,
            message=event.message,
            data=event.data.to_python(),
            timestamp=event.timestamp,
        )


class JSONOutput(StreamOutput):
    """Writes each event as one JSON object per line."""

    def __init__(self, stream: TextIO | None = None):
        super().__init__(stream if stream is not None else sys.stdout)

    def format(self, event: Event) -> str:
        return EventRecord.from_event(event).model_dump_json()
