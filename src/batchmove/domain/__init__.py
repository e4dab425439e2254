"""Domain layer - core business logic."""

from .models import ResultRecord, RunReport, SystemErrorRecord

__all__ = ["ResultRecord", "RunReport", "SystemErrorRecord"]
