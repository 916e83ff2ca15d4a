"""Logberry: structured, hierarchical event logging."""

from .aggregator import (
    ALWAYS,
    HIDDEN,
    QUIET,
    DBuilder,
    aggregate,
    aggregate_all,
    copy_value,
    field_tags,
)
from .config import Settings, load_settings
from .environment import (
    BuildMetadata,
    RepositoryMetadata,
    build_metadata_event,
    build_signature_event,
    command_line_event,
    configuration_event,
    environment_event,
    process_event,
)
from .errors import LogberryError, is_error, new_error, wrap_error
from .logging_config import get_logger, setup_logging
from .models import (
    NULL,
    Event,
    EventClass,
    EventData,
    EventDataMap,
    EventDataSequence,
    Scalar,
    ScalarKind,
)
from .outputs import (
    EventRecord,
    IErrorListener,
    IOutputDriver,
    JSONOutput,
    LoggingErrorListener,
    TextOutput,
)
from .root import BackgroundRoot, ImmediateRoot, IRoot
from .task import Task
from .toplevel import get_main, get_std, reset, set_std

__all__ = [
    # Models
    "EventData",
    "EventDataMap",
    "EventDataSequence",
    "Scalar",
    "ScalarKind",
    "NULL",
    "Event",
    "EventClass",
    # Aggregation
    "aggregate",
    "aggregate_all",
    "copy_value",
    "field_tags",
    "DBuilder",
    "QUIET",
    "HIDDEN",
    "ALWAYS",
    # Errors
    "LogberryError",
    "new_error",
    "wrap_error",
    "is_error",
    # Components
    "Task",
    "IRoot",
    "ImmediateRoot",
    "BackgroundRoot",
    "IOutputDriver",
    "IErrorListener",
    "TextOutput",
    "JSONOutput",
    "EventRecord",
    "LoggingErrorListener",
    # Environment
    "configuration_event",
    "command_line_event",
    "environment_event",
    "process_event",
    "build_metadata_event",
    "build_signature_event",
    "BuildMetadata",
    "RepositoryMetadata",
    # Defaults
    "get_std",
    "get_main",
    "set_std",
    "reset",
    # Configuration
    "Settings",
    "load_settings",
    "setup_logging",
    "get_logger",
]
