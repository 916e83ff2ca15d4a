"""Error listener reporting through the standard logging module."""

from ..errors import LogberryError
from ..logging_config import get_logger

INTERNAL_LOGGER = "logberry.internal"


class LoggingErrorListener:
    """Logs internal logging errors at ERROR level.

    The data of a LogberryError is attached as the record's ``context``.
    """

    def __init__(self, logger_name: str = INTERNAL_LOGGER):
        self._logger = get_logger(logger_name)

    def notify(self, error: Exception) -> None:
        context = error.data.to_python() if isinstance(error, LogberryError) else {}
        self._logger.error("Internal logging error: %s", error, extra={"context": context})
