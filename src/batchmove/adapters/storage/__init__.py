"""Storage adapters."""

from .filesystem import LocalFileSystemAdapter

__all__ = ["LocalFileSystemAdapter"]
