"""Event log adapter on top of stdlib logging handlers."""

import logging
import sys
from abc import abstractmethod

from ...domain.models import EventCode, Severity
from ...errors import EventLogError
from ...ports.eventlog import EventLogPort

LEVELS = {
    Severity.INFORMATION: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class RaisingHandlerMixin:
    """Handler mixin that surfaces emit failures instead of printing them."""

    def handleError(self, record: logging.LogRecord) -> None:
        cause = sys.exc_info()[1]
        event_id = getattr(record, "event_id", "?")
        raise EventLogError(f"Failed to write event {event_id}: {cause}") from cause


class LoggingEventLogAdapter(EventLogPort):
    """Routes events through one dedicated logger per channel and source."""

    def __init__(self) -> None:
        self._loggers: dict[tuple[str, str], logging.Logger] = {}

    @abstractmethod
    def create_handler(self, name: str, source: str) -> logging.Handler:
        """Create a handler writing to the channel, registering it if needed."""
        pass

    def ensure_channel(self, name: str, source: str) -> None:
        if (name, source) in self._loggers:
            return

        try:
            handler = self.create_handler(name, source)
        except Exception as e:
            raise EventLogError(f"Failed to open event log '{name}' for source '{source}': {e}") from e

        channel_logger = logging.getLogger(f"batchmove.eventlog.{name}.{source}")
        channel_logger.handlers.clear()
        channel_logger.addHandler(handler)
        channel_logger.setLevel(logging.INFO)
        channel_logger.propagate = False
        self._loggers[(name, source)] = channel_logger

    def publish(
        self,
        name: str,
        source: str,
        severity: Severity,
        code: EventCode,
        message: str,
    ) -> None:
        channel_logger = self._loggers.get((name, source))
        if channel_logger is None:
            raise EventLogError(f"Event log '{name}' not opened for source '{source}'")

        channel_logger.log(LEVELS[severity], message, extra={"event_id": int(code)})

    def close(self) -> None:
        for channel_logger in self._loggers.values():
            for handler in channel_logger.handlers:
                handler.close()
            channel_logger.handlers.clear()
        self._loggers.clear()
