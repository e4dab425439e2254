"""Mail adapters."""

from .smtp import SmtpMailAdapter

__all__ = ["SmtpMailAdapter"]
