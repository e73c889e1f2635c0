"""CoverageRegressionWatcher: flags files whose line coverage went down.

Runs once per project, after every coverage tool has written its report.
Each file's coverage is compared with the value the metrics service published
for the previous analysis. That value comes back rounded, so only a drop of
the rounded percentage counts as a regression.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covwatch.agents.base import AnalysisStep
from covwatch.agents.reporters.issues import build_regression_issue
from covwatch.models.coverage import CoverageCounts, Metric, RegressionEvent
from covwatch.rules import should_execute_coverage
from covwatch.utils.percentage import calculate_coverage, rounded_percentage_greater_than

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from covwatch.agents.base import IssuePerspectives, MeasureLookup
    from covwatch.config import CoverageConfig
    from covwatch.models.coverage import CoverageIssue, InputFile
    from covwatch.models.store import CoverageProjectStore
    from covwatch.rules import ActiveRules

    PreviousCoverageLookup = Callable[[str], float | None]

logger = logging.getLogger(__name__)


@dataclass
class CoverageRegressionResult:
    """Outcome of one pass over the project files."""

    files_analyzed: int = 0
    """Files enumerated."""

    files_measured: int = 0
    """Files with both coverage counts."""

    files_with_baseline: int = 0
    """Measured files with a previously published coverage."""

    regressions: list[RegressionEvent] = field(default_factory=list)
    """Every regression detected, attached or not."""

    issues: list[CoverageIssue] = field(default_factory=list)
    """Issues actually attached to files."""

    skipped: list[str] = field(default_factory=list)
    """Paths whose regression could not be attached."""


class CoverageRegressionWatcher(AnalysisStep):
    """Detects per-file line coverage regressions and raises one issue per file."""

    def __init__(
        self,
        files: Iterable[InputFile],
        measures: MeasureLookup,
        previous_coverage: PreviousCoverageLookup,
        perspectives: IssuePerspectives,
        store: CoverageProjectStore,
        *,
        config: CoverageConfig,
        active_rules: ActiveRules,
        project_key: str = "",
        diagnostics: logging.Logger | None = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            files: Source files of the project, enumerated once.
            measures: Lookup of the per-file counts written by the coverage tools.
            previous_coverage: Returns the coverage published for a resource key,
                or None when the resource has no history.
            perspectives: Resolves the file each issue is attached to.
            store: Project totals updated for every measured file.
            config: Coverage configuration (run gate flag).
            active_rules: Rules enabled for the analysis (run gate).
            project_key: Prefix of the per-file resource keys.
            diagnostics: Logger receiving warnings, defaults to the module logger.
        """
        self._files = files
        self._measures = measures
        self._previous_coverage = previous_coverage
        self._perspectives = perspectives
        self._store = store
        self._config = config
        self._active_rules = active_rules
        self._project_key = project_key
        self._log = diagnostics or logger

    @property
    def name(self) -> str:
        """Step identifier."""
        return "coverage_regression_watcher"

    @property
    def description(self) -> str:
        """Human-readable description."""
        return "Reports files whose line coverage decreased since the previous analysis"

    def __str__(self) -> str:
        return "Coverage Regression Watcher"

    def should_execute(self) -> bool:
        return should_execute_coverage(self._config, self._active_rules)

    def resource_key(self, file: InputFile) -> str:
        """Return the metrics service key of *file*."""
        if not self._project_key:
            return file.relative_path
        return f"{self._project_key}:{file.relative_path}"

    def analyse(self) -> CoverageRegressionResult:
        """Compare every measured file with its previous coverage.

        Returns:
            Counters, detected regressions and attached issues.
        """
        result = CoverageRegressionResult()

        for file in self._files:
            result.files_analyzed += 1
            counts = self._counts(file)
            if counts is None:
                continue
            result.files_measured += 1

            self._store.update_measurements(counts.lines_to_cover, counts.uncovered_lines)

            # Nothing to cover, nothing that can decrease
            if counts.lines_to_cover == 0:
                continue

            coverage = calculate_coverage(counts.lines_to_cover, counts.uncovered_lines)

            previous = self._previous_coverage(self.resource_key(file))
            if previous is None:
                continue
            result.files_with_baseline += 1

            # The service returns the coverage rounded, comparing unrounded
            # values would report sub-percent noise as regressions.
            if not rounded_percentage_greater_than(previous, coverage):
                continue

            event = RegressionEvent(
                file_path=file.relative_path,
                previous_coverage=previous,
                current_coverage=coverage,
                language=file.language,
            )
            result.regressions.append(event)

            issue = self._add_issue(file, event)
            if issue is None:
                result.skipped.append(file.relative_path)
            else:
                result.issues.append(issue)

        self._log.info(
            "Coverage regressions: %d file(s) measured, %d regression(s), %d issue(s) raised",
            result.files_measured,
            len(result.regressions),
            len(result.issues),
        )
        return result

    def _counts(self, file: InputFile) -> CoverageCounts | None:
        lines_to_cover = self._measures.get_measure(file, Metric.LINES_TO_COVER)
        uncovered_lines = self._measures.get_measure(file, Metric.UNCOVERED_LINES)
        if lines_to_cover is None or uncovered_lines is None:
            return None
        return CoverageCounts(lines_to_cover=lines_to_cover, uncovered_lines=uncovered_lines)

    def _add_issue(self, file: InputFile, event: RegressionEvent) -> CoverageIssue | None:
        issuable = self._perspectives.as_issuable(file)
        if issuable is None:
            self._log.warning(
                "Could not get an issuable perspective to create an issue for %s, skipping",
                file,
            )
            return None

        issue = build_regression_issue(event)
        issuable.add_issue(issue)
        return issue
