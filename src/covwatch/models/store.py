"""Project-wide line coverage totals accumulated during a single run."""

from __future__ import annotations

import logging

from covwatch.utils.percentage import calculate_coverage

logger = logging.getLogger(__name__)


class CoverageProjectStore:
    """Running totals of lines to cover and uncovered lines for one analysis run.

    The watcher feeds it once per measured file; reporters read the totals
    after the run. Totals only ever grow.
    """

    def __init__(self) -> None:
        self._lines_to_cover = 0
        self._uncovered_lines = 0
        self._files_measured = 0
        self._previous_project_coverage: float | None = None

    @property
    def lines_to_cover(self) -> int:
        return self._lines_to_cover

    @property
    def uncovered_lines(self) -> int:
        return self._uncovered_lines

    @property
    def files_measured(self) -> int:
        """Number of files that contributed to the totals."""
        return self._files_measured

    @property
    def project_coverage(self) -> float | None:
        """Line coverage of the whole project, or None when nothing is coverable."""
        if self._lines_to_cover == 0:
            return None
        return calculate_coverage(self._lines_to_cover, self._uncovered_lines)

    @property
    def previous_project_coverage(self) -> float | None:
        """Coverage last published for the whole project, if any."""
        return self._previous_project_coverage

    @previous_project_coverage.setter
    def previous_project_coverage(self, value: float | None) -> None:
        self._previous_project_coverage = value

    def update_measurements(self, lines_to_cover: int, uncovered_lines: int) -> None:
        """Add one file's counts to the project totals.

        Raises:
            ValueError: If either count is negative.
        """
        if lines_to_cover < 0 or uncovered_lines < 0:
            raise ValueError(
                f"Coverage counts must not be negative "
                f"(got: {lines_to_cover} to cover, {uncovered_lines} uncovered)"
            )
        self._lines_to_cover += lines_to_cover
        self._uncovered_lines += uncovered_lines
        self._files_measured += 1
        logger.debug(
            "Project totals: %d lines to cover, %d uncovered",
            self._lines_to_cover,
            self._uncovered_lines,
        )
