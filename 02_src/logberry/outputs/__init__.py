"""Output drivers and error listeners."""

from .driver import IErrorListener, IOutputDriver, StreamOutput
from .json_output import EventRecord, JSONOutput
from .listener import LoggingErrorListener
from .text_output import TextOutput

__all__ = [
    "IOutputDriver",
    "IErrorListener",
    "StreamOutput",
    "TextOutput",
    "JSONOutput",
    "EventRecord",
    "LoggingErrorListener",
]
