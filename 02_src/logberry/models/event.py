"""Event data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .tree import EventDataMap


class EventClass(str, Enum):
    """Tags identifying common classes of events."""

    BEGIN = "begin"
    END = "end"
    CONFIGURATION = "configuration"
    READY = "ready"
    STOPPED = "stopped"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class Event:
    """An annotated occurrence, a single log entry."""

    task_id: int
    parent_id: int | None
    component: str
    event: str  # EventClass value or a user-defined tag
    message: str
    data: EventDataMap
    timestamp: datetime


def event_tag(tag: "EventClass | str") -> str:
    """Return the plain string form of an event class tag."""
    if isinstance(tag, EventClass):
        return tag.value
    return str(tag)
