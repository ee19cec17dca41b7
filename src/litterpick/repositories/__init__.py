"""Data access helpers."""

from .report_repo import ReportStore

__all__ = ["ReportStore"]
