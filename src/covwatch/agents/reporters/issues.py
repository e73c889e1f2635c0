"""Rendering of coverage regressions into review issues."""

from __future__ import annotations

from typing import TYPE_CHECKING

from covwatch.models.coverage import CoverageIssue
from covwatch.rules import decreasing_line_coverage_rule
from covwatch.utils.percentage import format_percentage

if TYPE_CHECKING:
    from covwatch.models.coverage import RegressionEvent

_MESSAGE_TEMPLATE = "Line coverage of file {path} lowered from {previous}% to {current}%."


def format_issue_message(path: str, coverage: float, previous_coverage: float) -> str:
    """Return the review message for a file whose coverage went down."""
    return _MESSAGE_TEMPLATE.format(
        path=path,
        previous=format_percentage(previous_coverage),
        current=format_percentage(coverage),
    )


def build_regression_issue(event: RegressionEvent) -> CoverageIssue:
    """Turn a regression into the issue attached to the file."""
    return CoverageIssue(
        rule_key=decreasing_line_coverage_rule(event.language),
        message=format_issue_message(
            event.file_path, event.current_coverage, event.previous_coverage
        ),
        file_path=event.file_path,
    )
