"""Contracts between the analysis steps and the host running them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from covwatch.models.coverage import CoverageIssue, InputFile, Metric


class MeasureLookup(Protocol):
    """Source of per-file measures computed by the coverage tools."""

    def get_measure(self, file: InputFile, metric: Metric) -> int | None:
        """Return the measure value, or None when the file was not measured."""
        ...


class Issuable(Protocol):
    """A file that accepts review annotations in the current run."""

    def add_issue(self, issue: CoverageIssue) -> None: ...


class IssuePerspectives(Protocol):
    """Resolves the issuable perspective of a file."""

    def as_issuable(self, file: InputFile) -> Issuable | None:
        """Return the issuable perspective of *file*, or None if it cannot carry issues."""
        ...


class AnalysisStep(ABC):
    """Abstract base class for a step run once per analyzed project."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name identifying this step."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this step does."""

    @abstractmethod
    def should_execute(self) -> bool:
        """Return True if the step applies to the current project."""

    @abstractmethod
    def analyse(self) -> object:
        """Run the step over the whole project and return its result."""
