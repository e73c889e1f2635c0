"""Domain models for line coverage regression detection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class Metric(Enum):
    """Per-file measures consumed from the coverage tools."""

    LINES_TO_COVER = "lines_to_cover"
    UNCOVERED_LINES = "uncovered_lines"


@dataclass(frozen=True)
class InputFile:
    """A source file of the analyzed project."""

    relative_path: str
    """POSIX path relative to the project root."""

    language: str
    """Language identifier (``python``, ``java``, ...). Empty when unknown."""

    absolute_path: Path | None = None
    """Location on disk, when the file came from a directory scan."""

    def __str__(self) -> str:
        return self.relative_path


@dataclass(frozen=True)
class CoverageCounts:
    """Raw line coverage counts measured for one file."""

    lines_to_cover: int
    uncovered_lines: int

    @property
    def covered_lines(self) -> int:
        return self.lines_to_cover - self.uncovered_lines


@dataclass(frozen=True)
class RegressionEvent:
    """A file whose rounded line coverage dropped below its previous value."""

    file_path: str
    previous_coverage: float
    current_coverage: float
    language: str


@dataclass(frozen=True)
class RuleKey:
    """Identifier of the rule an issue is raised against."""

    repository: str
    rule: str

    def __str__(self) -> str:
        return f"{self.repository}:{self.rule}"

    @classmethod
    def parse(cls, value: str) -> RuleKey:
        """Parse a ``repository:rule`` string.

        Raises:
            ValueError: If the string has no repository or rule part.
        """
        repository, sep, rule = value.strip().partition(":")
        if not sep or not repository or not rule:
            raise ValueError(f"Invalid rule key: {value!r} (expected 'repository:rule')")
        return cls(repository=repository, rule=rule)


@dataclass(frozen=True)
class CoverageIssue:
    """A review annotation attached to a file."""

    rule_key: RuleKey
    message: str
    file_path: str
    severity: str = "MAJOR"
