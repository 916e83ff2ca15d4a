"""Structured error reports."""

import sys
from typing import Any

from .aggregator import aggregate_all


class LogberryError(Exception):
    """Structured information about a fault.

    Attributes:
        code: Optional identifier differentiating classes of errors.
        message: Human-oriented description of the fault.
        data: Inputs, parameters and other data associated with the fault.
        file: Source file where the error was located.
        line: Source line where the error was located.
        cause: Optional preceding error underlying the fault.
        reported: Set once the error has been emitted in a log event.
    """

    __logberry_tags__ = {"cause": "quiet", "reported": "quiet"}

    def __init__(
        self,
        message: str,
        *data: Any,
        cause: BaseException | None = None,
        code: str = "",
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = aggregate_all(*data)
        self.file = ""
        self.line = 0
        self.cause = cause
        self.reported = False
        self.__cause__ = cause

    def locate(self, skip: int = 0) -> "LogberryError":
        """Record the source position ``skip`` frames above the caller."""
        try:
            frame = sys._getframe(skip + 1)
        except ValueError:
            return self
        self.file = frame.f_code.co_filename
        self.line = frame.f_lineno
        return self

    def set_code(self, code: str) -> "LogberryError":
        """Associate the error with an error class string."""
        self.code = code
        return self

    def __str__(self) -> str:
        # The wrapped cause is not included; it is reported separately.
        text = self.message
        if self.file:
            text += f" [{self.file}:{self.line}]"
        if self.data:
            text += f" {self.data.text()}"
        return text


def new_error(message: str, *data: Any) -> LogberryError:
    """Create an error located at the caller."""
    return LogberryError(message, *data).locate(1)


def wrap_error(message: str, cause: BaseException, *data: Any) -> LogberryError:
    """Create an error wrapping ``cause``, located at the caller."""
    return LogberryError(message, *data, cause=cause).locate(1)


def is_error(err: BaseException | None, *codes: str) -> bool:
    """Return True if ``err`` is a LogberryError tagged with any of ``codes``."""
    if not isinstance(err, LogberryError):
        return False
    return err.code in codes
