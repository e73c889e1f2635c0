"""Reporters rendering coverage regression results."""

from __future__ import annotations

from covwatch.agents.reporters.json_reporter import JSONReporter
from covwatch.agents.reporters.sarif import SARIFReporter
from covwatch.agents.reporters.sink import ReviewIssueCollector
from covwatch.agents.reporters.terminal import CLIReporter, reporter

__all__ = [
    "CLIReporter",
    "JSONReporter",
    "ReviewIssueCollector",
    "SARIFReporter",
    "reporter",
]
