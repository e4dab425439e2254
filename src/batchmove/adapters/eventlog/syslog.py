"""Event log adapter for syslog."""

import logging
import logging.handlers
from pathlib import Path

from .base import LoggingEventLogAdapter, RaisingHandlerMixin

DEV_LOG = Path("/dev/log")


class _SysLogHandler(RaisingHandlerMixin, logging.handlers.SysLogHandler):
    pass


class SyslogEventLogAdapter(LoggingEventLogAdapter):
    """Writes events to the local syslog daemon, channel as tag."""

    def __init__(self, address: str | tuple[str, int] | None = None) -> None:
        super().__init__()
        if address is None:
            address = str(DEV_LOG) if DEV_LOG.exists() else ("localhost", 514)
        self.address = address

    def create_handler(self, name: str, source: str) -> logging.Handler:
        handler = _SysLogHandler(
            address=self.address, facility=logging.handlers.SysLogHandler.LOG_USER
        )
        handler.ident = f"{source}: "
        handler.setFormatter(logging.Formatter(f"[{name}] %(event_id)s %(message)s"))
        return handler
