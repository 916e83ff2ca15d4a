"""Core data models for logberry."""

from .event import Event, EventClass, event_tag
from .tree import (
    NULL,
    EventData,
    EventDataMap,
    EventDataSequence,
    Null,
    Scalar,
    ScalarKind,
    render_key,
)

__all__ = [
    # Value tree
    "EventData",
    "EventDataMap",
    "EventDataSequence",
    "Scalar",
    "ScalarKind",
    "Null",
    "NULL",
    "render_key",
    # Events
    "Event",
    "EventClass",
    "event_tag",
]
