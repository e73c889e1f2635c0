"""In-process issue sink collecting the annotations raised during a run."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from covwatch.models.coverage import CoverageIssue, InputFile

logger = logging.getLogger(__name__)


class _FileIssues:
    """Issuable perspective of a single file."""

    def __init__(self, collector: ReviewIssueCollector, file: InputFile) -> None:
        self._collector = collector
        self._file = file

    def add_issue(self, issue: CoverageIssue) -> None:
        self._collector._record(self._file, issue)


class ReviewIssueCollector:
    """Collects issues per file, optionally restricted to a review scope.

    With a scope (e.g. the files changed in a pull request), files outside of
    it have no issuable perspective, as review tools can only annotate files
    that are part of the review.
    """

    def __init__(self, scope: Iterable[str] | None = None) -> None:
        self._scope = frozenset(scope) if scope is not None else None
        self._issues: dict[str, list[CoverageIssue]] = {}

    def as_issuable(self, file: InputFile) -> _FileIssues | None:
        if self._scope is not None and file.relative_path not in self._scope:
            return None
        return _FileIssues(self, file)

    def _record(self, file: InputFile, issue: CoverageIssue) -> None:
        logger.debug("Issue on %s: %s", file.relative_path, issue.message)
        self._issues.setdefault(file.relative_path, []).append(issue)

    @property
    def issues(self) -> list[CoverageIssue]:
        """All collected issues, in the order they were raised."""
        return [issue for file_issues in self._issues.values() for issue in file_issues]

    def issues_for(self, path: str) -> list[CoverageIssue]:
        return list(self._issues.get(path, []))

    def __len__(self) -> int:
        return sum(len(file_issues) for file_issues in self._issues.values())
