"""File system port - interface for enumeration, moves and metadata."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import FileMetadata


class FileSystemPort(ABC):
    """Interface for file system access."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        pass

    @abstractmethod
    def list_files(self, folder: Path, recursive: bool = False) -> list[Path]:
        """List regular files in folder, sorted by path."""
        pass

    @abstractmethod
    def ensure_directory(self, path: Path) -> None:
        """Create directory (and parents) if it does not exist."""
        pass

    @abstractmethod
    def move_file(self, source: Path, destination: Path) -> None:
        """Move a file.

        Raises an OSError subclass on failure.
        """
        pass

    @abstractmethod
    def delete_file(self, path: Path) -> None:
        pass

    @abstractmethod
    def file_metadata(self, path: Path) -> "FileMetadata":
        pass
