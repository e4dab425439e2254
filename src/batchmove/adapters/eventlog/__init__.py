"""Event log adapters."""

import sys

from ...ports.eventlog import EventLogPort
from .syslog import SyslogEventLogAdapter

__all__ = ["SyslogEventLogAdapter", "create_event_log_adapter"]


def create_event_log_adapter() -> EventLogPort:
    """Create the event log adapter for this platform."""
    if sys.platform == "win32":
        from .windows import WindowsEventLogAdapter

        return WindowsEventLogAdapter()
    return SyslogEventLogAdapter()
