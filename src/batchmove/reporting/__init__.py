"""Reporting stages for finished batches."""

from .pipeline import ReportingOutcome, run_reporting

__all__ = ["ReportingOutcome", "run_reporting"]
