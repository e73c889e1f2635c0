"""Coverage report adapters producing unified line coverage data."""

from covwatch.adapters.coverage.base import (
    CoverageAdapter,
    CoverageReport,
    FileCoverage,
    LineCoverage,
)
from covwatch.adapters.coverage.coverage_py_adapter import CoveragePyAdapter
from covwatch.adapters.coverage.istanbul import IstanbulAdapter
from covwatch.adapters.coverage.jacoco import JaCoCoAdapter

__all__ = [
    "CoverageAdapter",
    "CoveragePyAdapter",
    "CoverageReport",
    "FileCoverage",
    "IstanbulAdapter",
    "JaCoCoAdapter",
    "LineCoverage",
]
