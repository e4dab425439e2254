"""Event log adapter for the Windows event log."""

import logging
import logging.handlers

from ...errors import EventLogError
from .base import LoggingEventLogAdapter, RaisingHandlerMixin


class _EventIdHandler(RaisingHandlerMixin, logging.handlers.NTEventLogHandler):
    """NTEventLogHandler taking the event id from the record."""

    def getEventID(self, record: logging.LogRecord) -> int:
        return getattr(record, "event_id", 1)


class WindowsEventLogAdapter(LoggingEventLogAdapter):
    """Writes events to a Windows event log, registering the source."""

    def create_handler(self, name: str, source: str) -> logging.Handler:
        try:
            import win32evtlogutil  # noqa: F401
        except ImportError as e:
            raise EventLogError("pywin32 is required to write to the Windows event log") from e

        # Registers source under the log name when absent
        return _EventIdHandler(appname=source, logtype=name)
