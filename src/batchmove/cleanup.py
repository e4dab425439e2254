"""Remove old log files based on retention policy."""

import logging
from datetime import datetime, timedelta
from pathlib import Path

from .domain.models import RunReport
from .ports.filesystem import FileSystemPort

logger = logging.getLogger(__name__)


def run_cleanup(
    fs: FileSystemPort,
    directory: Path,
    max_age_days: int,
    report: RunReport,
    recursive: bool = False,
    now: datetime | None = None,
) -> int:
    """Remove files older than max_age_days from directory.

    Each failed deletion becomes a system error; the sweep goes on.
    Returns number of files removed.
    """
    if max_age_days <= 0:
        return 0

    if not fs.exists(directory):
        logger.warning(f"Log directory not found: {directory}")
        return 0

    cutoff = (now or datetime.now()) - timedelta(days=max_age_days)

    try:
        files = fs.list_files(directory, recursive=recursive)
    except OSError as e:
        message = f"Failed to list log files in '{directory}': {e}"
        logger.warning(message)
        report.append_system_error(message)
        return 0

    removed = 0
    for path in files:
        try:
            metadata = fs.file_metadata(path)
            if not metadata.is_file or metadata.last_modified >= cutoff:
                continue

            logger.info(f"Removing old file: {path.name}")
            fs.delete_file(path)
            removed += 1
        except OSError as e:
            message = f"Failed to remove old log file '{path}': {e}"
            logger.warning(message)
            report.append_system_error(message)

    logger.info(f"Cleanup complete: {removed} files removed from {directory}")
    return removed
