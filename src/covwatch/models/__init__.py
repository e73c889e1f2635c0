"""Data models for covwatch."""

from covwatch.models.coverage import (
    CoverageCounts,
    CoverageIssue,
    InputFile,
    Metric,
    RegressionEvent,
    RuleKey,
)
from covwatch.models.store import CoverageProjectStore

__all__ = [
    "CoverageCounts",
    "CoverageIssue",
    "CoverageProjectStore",
    "InputFile",
    "Metric",
    "RegressionEvent",
    "RuleKey",
]
