"""Adapters turning coverage tool output into per-file measures."""

from covwatch.adapters.measures import ReportMeasureProvider, load_coverage_reports

__all__ = [
    "ReportMeasureProvider",
    "load_coverage_reports",
]
