"""Domain services - orchestrate business logic."""

import logging
import re
from datetime import datetime
from pathlib import Path

from ..errors import BatchMoveError, describe
from ..ports.filesystem import FileSystemPort
from .models import ResultRecord, RunReport
from .renamer import DEFAULT_DATE_PATTERN, destination_folder, try_rename

logger = logging.getLogger(__name__)


class BatchService:
    """Moves dated files from the source folder into the destination tree."""

    def __init__(
        self,
        fs: FileSystemPort,
        source_folder: Path,
        destination_root: Path,
        match_pattern: re.Pattern[str],
        file_name_prefix: str,
        file_extension: str | None = None,
        year_subfolder: bool = True,
        recursive: bool = False,
        date_pattern: re.Pattern[str] = DEFAULT_DATE_PATTERN,
    ) -> None:
        self.fs = fs
        self.source_folder = source_folder
        self.destination_root = destination_root
        self.match_pattern = match_pattern
        self.file_name_prefix = file_name_prefix
        self.file_extension = file_extension
        self.year_subfolder = year_subfolder
        self.recursive = recursive
        self.date_pattern = date_pattern

    def run(self, report: RunReport) -> RunReport:
        """Process every matching source file into the report.

        A missing source or destination folder is a system error and
        stops the batch before any file is touched.
        """
        for label, folder in (
            ("Source", self.source_folder),
            ("Destination", self.destination_root),
        ):
            if not self.fs.exists(folder):
                message = f"{label} folder '{folder}' not found"
                logger.error(message)
                report.append_system_error(message)
                return report

        try:
            files = self.fs.list_files(self.source_folder, recursive=self.recursive)
        except OSError as e:
            message = f"Failed to list files in '{self.source_folder}': {e}"
            logger.error(message)
            report.append_system_error(message)
            return report

        matching = [f for f in files if self.match_pattern.search(f.name)]
        logger.info(
            f"Found {len(matching)} file(s) matching '{self.match_pattern.pattern}' "
            f"in {self.source_folder}"
        )

        for path in matching:
            report.add_result(self.record_attempt(path))

        return report

    def record_attempt(self, source_file: Path) -> ResultRecord:
        """Rename and move one file; always returns a record."""
        timestamp = datetime.now()
        new_file_name: str | None = None
        destination: Path | None = None

        try:
            plan = try_rename(
                source_file.name,
                self.date_pattern,
                prefix=self.file_name_prefix,
                extension=self.file_extension,
            )
            new_file_name = plan.new_file_name
            destination = destination_folder(
                self.destination_root, plan.year, self.year_subfolder
            )

            try:
                self.fs.ensure_directory(destination)
            except OSError as e:
                raise BatchMoveError(f"failed to create folder '{destination}'") from e

            target = destination / new_file_name
            try:
                self.fs.move_file(source_file, target)
            except OSError as e:
                raise BatchMoveError(
                    f"failed to move file '{source_file}' to '{target}'"
                ) from e

        except Exception as e:
            error = describe(e)
            logger.warning(f"Failed: {source_file.name} - {error}")
            return ResultRecord(
                timestamp=timestamp,
                source_folder=source_file.parent,
                source_file_name=source_file.name,
                new_file_name=new_file_name,
                destination_folder=destination,
                error=error,
            )

        logger.info(f"Moved: {source_file.name} -> {destination / new_file_name}")
        return ResultRecord(
            timestamp=timestamp,
            source_folder=source_file.parent,
            source_file_name=source_file.name,
            new_file_name=new_file_name,
            destination_folder=destination,
            moved=True,
        )
