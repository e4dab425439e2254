"""Reporting stages run after the batch loop.

Stages run in a fixed order: log files, retention, event log, mail. Each
stage records its own failures as system errors so that the next stage
still runs and can report them.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path

from ..cleanup import run_cleanup
from ..config import Settings
from ..domain.models import MailMessage, RunReport
from ..errors import describe
from ..ports.eventlog import EventLogPort
from ..ports.filesystem import FileSystemPort
from ..ports.mail import MailPort
from .events import build_event_entries, publish_events
from .notify import assemble_attachments, decide, render_report_html, send_notification
from .sinks import SinkWriteOutcome, highlight_errors, write_log_files

logger = logging.getLogger(__name__)

SYSTEM_ERRORS = "System errors"
ALL_ACTIONS = "All actions"
ACTION_ERRORS = "Action errors"
EVENT_LOG_ERRORS = "Event log errors"


@dataclass
class ReportingOutcome:
    log_files: list[Path] = field(default_factory=list)
    events_written: int = 0
    mail: MailMessage | None = None


def log_file_stem(config: Settings, started_at: datetime) -> Path | None:
    """``<log folder>/<started_at formatted> - <script name>``"""
    where = config.settings.save_log_files.where
    if where.folder is None:
        return None
    return where.folder / f"{started_at.strftime(where.file_name_format)} - {config.settings.script_name}"


def _with_suffix(stem: Path, suffix: str) -> Path:
    return stem.with_name(f"{stem.name} - {suffix}")


def write_run_logs(config: Settings, report: RunReport, stem: Path) -> SinkWriteOutcome:
    """Write the enabled log files for a report.

    Rows are taken before anything is written, so failures of this stage
    never end up in its own files.
    """
    save = config.settings.save_log_files
    formats = save.where.file_extensions

    jobs = []
    if save.what.system_errors and report.system_errors:
        jobs.append((SYSTEM_ERRORS, [e.as_row() for e in report.system_errors], None))
    if save.what.all_actions and report.results:
        jobs.append((ALL_ACTIONS, [r.as_row() for r in report.results], highlight_errors))
    if save.what.only_action_errors and report.action_errors:
        jobs.append((ACTION_ERRORS, [r.as_row() for r in report.action_errors], highlight_errors))

    outcome = SinkWriteOutcome()
    for kind, rows, style in jobs:
        written = write_log_files(
            rows,
            _with_suffix(stem, kind),
            formats,
            save.append,
            sheet_name=kind,
            table_name=kind.replace(" ", ""),
            cell_style=style,
        )
        outcome.paths.extend(written.paths)
        outcome.errors.extend(written.errors)

    return outcome


def _publish_event_log(
    config: Settings,
    report: RunReport,
    event_log: EventLogPort,
    stem: Path | None,
) -> int:
    options = config.settings
    entries = build_event_entries(report, options.script_name)

    try:
        return publish_events(
            event_log, options.script_name, options.save_in_event_log.log_name, entries
        )
    except Exception as e:
        message = (
            f"Failed to write to event log '{options.save_in_event_log.log_name}': {describe(e)}"
        )
        logger.warning(message)
        record = report.append_system_error(message)

        formats = options.save_log_files.where.file_extensions
        if stem is not None and formats:
            written = write_log_files(
                [record.as_row()],
                _with_suffix(stem, EVENT_LOG_ERRORS),
                formats,
                append=True,
                sheet_name=EVENT_LOG_ERRORS,
                table_name="EventLogErrors",
            )
            for error in written.errors:
                report.append_system_error(error)
        return 0


def _send_mail(
    config: Settings,
    report: RunReport,
    fs: FileSystemPort,
    mailer: MailPort,
    log_files: list[Path],
) -> MailMessage | None:
    policy = config.settings.send_mail
    decision = decide(
        policy,
        len(report.results),
        report.action_error_count,
        len(report.system_errors),
    )
    if not decision.should_send:
        logger.info("No mail sent: send policy not met")
        return None

    decision = replace(decision, body=decision.body + render_report_html(report))

    try:
        decision = assemble_attachments(
            decision, [*log_files, *policy.attachments], fs, policy.max_total_attachment_size
        )
        return send_notification(policy, decision, mailer)
    except Exception as e:
        message = f"Failed to send mail: {describe(e)}"
        logger.warning(message)
        report.append_system_error(message)
        return None


def run_reporting(
    config: Settings,
    report: RunReport,
    fs: FileSystemPort,
    event_log: EventLogPort,
    mailer: MailPort,
) -> ReportingOutcome:
    """Hand the finished report to every reporting stage in order."""
    outcome = ReportingOutcome()
    save = config.settings.save_log_files
    stem = log_file_stem(config, report.started_at)

    # 1. Log files
    if stem is not None and save.where.file_extensions:
        written = write_run_logs(config, report, stem)
        outcome.log_files = written.paths
        for error in written.errors:
            report.append_system_error(error)

    # 2. Retention
    if save.where.folder is not None:
        run_cleanup(
            fs,
            save.where.folder,
            save.delete_logs_after_days,
            report,
            recursive=save.recursive_cleanup,
        )

    # 3. Event log
    if config.settings.save_in_event_log.save:
        outcome.events_written = _publish_event_log(config, report, event_log, stem)

    # 4. Mail
    outcome.mail = _send_mail(config, report, fs, mailer, outcome.log_files)

    return outcome
