"""Aggregator module."""

from .aggregator import (
    ALWAYS,
    CYCLE_MARKER,
    ERROR_KEY,
    HIDDEN,
    HIDDEN_MARKER,
    QUIET,
    VALUE_KEY,
    DBuilder,
    aggregate,
    aggregate_all,
    copy_value,
    describe,
    field_tags,
    is_record,
)

__all__ = [
    "aggregate",
    "aggregate_all",
    "copy_value",
    "describe",
    "field_tags",
    "is_record",
    "DBuilder",
    "QUIET",
    "HIDDEN",
    "ALWAYS",
    "HIDDEN_MARKER",
    "CYCLE_MARKER",
    "ERROR_KEY",
    "VALUE_KEY",
]
