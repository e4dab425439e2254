"""Batch run: move dated files, then report."""

import logging

from .adapters.eventlog import create_event_log_adapter
from .adapters.mail import SmtpMailAdapter
from .adapters.storage import LocalFileSystemAdapter
from .config import Settings
from .domain.models import RunReport
from .domain.services import BatchService
from .ports.eventlog import EventLogPort
from .ports.filesystem import FileSystemPort
from .ports.mail import MailPort
from .reporting import run_reporting

logger = logging.getLogger(__name__)


def create_batch_service(config: Settings, fs: FileSystemPort) -> BatchService:
    """Create a BatchService from configuration."""
    return BatchService(
        fs=fs,
        source_folder=config.source.folder,
        destination_root=config.destination.folder,
        match_pattern=config.source.pattern,
        file_name_prefix=config.destination.file_name_prefix,
        file_extension=config.destination.file_extension,
        year_subfolder=config.destination.year_subfolder,
        recursive=config.source.recursive,
    )


def run_batch(
    config: Settings,
    fs: FileSystemPort | None = None,
    event_log: EventLogPort | None = None,
    mailer: MailPort | None = None,
) -> RunReport:
    """Run one batch and all reporting stages.

    Returns the report; its exit_code is the pass/fail signal.
    """
    fs = fs or LocalFileSystemAdapter()
    event_log = event_log or create_event_log_adapter()
    mailer = mailer or SmtpMailAdapter()

    report = RunReport()
    logger.info(f"Script: {config.settings.script_name}")
    logger.info(f"Source: {config.source.folder} ({config.source.match_pattern})")
    logger.info(f"Destination: {config.destination.folder}")

    service = create_batch_service(config, fs)
    service.run(report)

    run_reporting(config, report, fs, event_log, mailer)

    logger.info(
        f"Batch finished: {len(report.results)} processed, {report.moved_count} moved, "
        f"{report.action_error_count} action errors, {len(report.system_errors)} system errors"
    )
    return report
