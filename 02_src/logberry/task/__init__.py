"""Task module."""

from .task import CAUSE_KEY, DURATION_KEY, Task

__all__ = ["CAUSE_KEY", "DURATION_KEY", "Task"]
