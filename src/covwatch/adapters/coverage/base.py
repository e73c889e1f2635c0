"""Base classes and data models for coverage report adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covwatch.models.coverage import CoverageCounts

if TYPE_CHECKING:
    from pathlib import Path


@dataclass
class LineCoverage:
    """Coverage data for a single executable line."""

    line_number: int
    execution_count: int

    @property
    def is_covered(self) -> bool:
        """Return True if this line was executed at least once."""
        return self.execution_count > 0


@dataclass
class FileCoverage:
    """Line coverage data for a single source file."""

    file_path: str
    lines: list[LineCoverage] = field(default_factory=list)

    @property
    def lines_to_cover(self) -> int:
        """Number of distinct executable lines."""
        return len({line.line_number for line in self.lines})

    @property
    def uncovered_lines(self) -> int:
        """Number of executable lines never executed."""
        hits: dict[int, int] = {}
        for line in self.lines:
            hits[line.line_number] = hits.get(line.line_number, 0) + line.execution_count
        return sum(1 for count in hits.values() if count == 0)

    @property
    def counts(self) -> CoverageCounts:
        return CoverageCounts(
            lines_to_cover=self.lines_to_cover,
            uncovered_lines=self.uncovered_lines,
        )


@dataclass
class CoverageReport:
    """Unified line coverage report across the files of a project.

    Every adapter (coverage.py, JaCoCo, Istanbul) translates its native report
    into this format.
    """

    files: dict[str, FileCoverage] = field(default_factory=dict)

    def merge(self, other: CoverageReport) -> None:
        """Fold *other* into this report, combining lines of files present in both."""
        for path, file_cov in other.files.items():
            existing = self.files.get(path)
            if existing is None:
                self.files[path] = FileCoverage(file_path=path, lines=list(file_cov.lines))
            else:
                existing.lines.extend(file_cov.lines)


class CoverageAdapter(ABC):
    """Abstract base class for coverage report adapters.

    Each concrete adapter knows where its tool writes reports and how to parse
    them into the unified CoverageReport format. Running the tool itself is
    left to the build.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Coverage tool identifier (e.g. 'coverage.py', 'jacoco')."""

    @property
    @abstractmethod
    def language(self) -> str:
        """Primary language of the reports (e.g. 'python', 'java')."""

    @property
    @abstractmethod
    def report_paths(self) -> tuple[str, ...]:
        """Conventional report locations, relative to the project root."""

    @abstractmethod
    def can_parse(self, coverage_file: Path) -> bool:
        """Return True if *coverage_file* looks like a report of this tool."""

    @abstractmethod
    def parse_coverage_file(self, coverage_file: Path) -> CoverageReport:
        """Parse a coverage report file into unified format.

        Args:
            coverage_file: Path to the native coverage report file.

        Returns:
            A CoverageReport with parsed coverage data.
        """

    def detect(self, project_path: Path) -> list[Path]:
        """Return the conventional report files present under *project_path*."""
        return [
            project_path / rel for rel in self.report_paths if (project_path / rel).is_file()
        ]
