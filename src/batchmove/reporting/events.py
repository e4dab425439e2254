"""Projection of a run report onto event log entries."""

import logging
from collections.abc import Iterable

from ..domain.models import EventCode, EventLogEntry, RunReport, Severity
from ..ports.eventlog import EventLogPort

logger = logging.getLogger(__name__)


def build_event_entries(report: RunReport, script_name: str) -> list[EventLogEntry]:
    """Build the ordered events for a finished batch.

    Starts with a 100 event, ends with a 199 event. Every system error
    present at call time becomes an Error/2 entry.
    """
    entries = [
        EventLogEntry(
            Severity.INFORMATION,
            EventCode.BATCH_START,
            f"Script '{script_name}' started at {report.started_at:%Y-%m-%d %H:%M:%S}",
        )
    ]

    for result in report.results:
        if result.moved:
            entries.append(
                EventLogEntry(
                    Severity.INFORMATION,
                    EventCode.SUCCESS,
                    f"Moved '{result.source_folder / result.source_file_name}' "
                    f"to '{result.destination_folder / result.new_file_name}'",
                )
            )
        else:
            entries.append(
                EventLogEntry(
                    Severity.WARNING,
                    EventCode.WARNING,
                    f"Failed to move '{result.source_folder / result.source_file_name}': "
                    f"{result.error}",
                )
            )

    entries.append(
        EventLogEntry(
            Severity.INFORMATION,
            EventCode.INFO,
            f"{len(report.results)} file(s) processed, {report.moved_count} moved, "
            f"{report.action_error_count} action error(s), "
            f"{len(report.system_errors)} system error(s)",
        )
    )

    for error in report.system_errors:
        entries.append(EventLogEntry(Severity.ERROR, EventCode.ERROR, error.message))

    entries.append(
        EventLogEntry(Severity.INFORMATION, EventCode.BATCH_END, f"Script '{script_name}' ended")
    )
    return entries


def publish_events(
    port: EventLogPort,
    source: str,
    channel_name: str,
    entries: Iterable[EventLogEntry],
) -> int:
    """Write entries to the named channel, creating it when absent.

    Errors from the port propagate; the caller decides how to record them.
    Returns number of entries written.
    """
    port.ensure_channel(channel_name, source)

    written = 0
    for entry in entries:
        port.publish(channel_name, source, entry.severity, entry.code, entry.message)
        written += 1

    logger.info(f"Event log '{channel_name}': {written} entries written for '{source}'")
    return written
