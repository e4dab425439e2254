"""File system adapter using the local disk."""

import logging
import shutil
from datetime import datetime
from pathlib import Path

from ...domain.models import FileMetadata
from ...ports.filesystem import FileSystemPort

logger = logging.getLogger(__name__)


class LocalFileSystemAdapter(FileSystemPort):
    """File system implementation using pathlib and shutil."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def list_files(self, folder: Path, recursive: bool = False) -> list[Path]:
        pattern = "**/*" if recursive else "*"
        return sorted(p for p in folder.glob(pattern) if p.is_file())

    def ensure_directory(self, path: Path) -> None:
        if not path.is_dir():
            path.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created folder: {path}")

    def move_file(self, source: Path, destination: Path) -> None:
        """Move file without overwriting an existing destination."""
        if destination.exists():
            raise FileExistsError(f"Destination file already exists: {destination}")

        shutil.move(str(source), destination)
        logger.debug(f"Moved: {source} -> {destination}")

    def delete_file(self, path: Path) -> None:
        path.unlink()
        logger.debug(f"Deleted: {path}")

    def file_metadata(self, path: Path) -> FileMetadata:
        st = path.stat()
        return FileMetadata(
            size=st.st_size,
            last_modified=datetime.fromtimestamp(st.st_mtime),
            is_file=path.is_file(),
        )
