"""Watcher steps comparing the current analysis with previous ones."""

from covwatch.agents.watchers.coverage import CoverageRegressionResult, CoverageRegressionWatcher

__all__ = [
    "CoverageRegressionResult",
    "CoverageRegressionWatcher",
]
