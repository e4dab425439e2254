"""Ports - interfaces for external dependencies."""

from .eventlog import EventLogPort
from .filesystem import FileSystemPort
from .mail import MailPort

__all__ = ["EventLogPort", "FileSystemPort", "MailPort"]
