"""Coverage.py adapter for Python projects.

Reads the JSON report written by ``coverage json`` or
``pytest --cov-report=json``.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

from covwatch.adapters.coverage.base import (
    CoverageAdapter,
    CoverageReport,
    FileCoverage,
    LineCoverage,
)

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

# Coverage file locations (coverage.py standard paths)
_COVERAGE_PATHS = (
    "coverage.json",
    ".coverage.json",
    "htmlcov/coverage.json",
)


# ── Adapter ──────────────────────────────────────────────────────


class CoveragePyAdapter(CoverageAdapter):
    """Coverage.py adapter for Python projects."""

    # ── Identity ─────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return "coverage.py"

    @property
    def language(self) -> str:
        return "python"

    @property
    def report_paths(self) -> tuple[str, ...]:
        return _COVERAGE_PATHS

    def can_parse(self, coverage_file: Path) -> bool:
        return coverage_file.suffix == ".json" and "coverage" in coverage_file.name

    # ── Coverage parsing ─────────────────────────────────────────

    def parse_coverage_file(self, coverage_file: Path) -> CoverageReport:
        """Parse coverage.py JSON format into unified report.

        Coverage.py JSON format:
        {
          "meta": {"version": "7.x.x", ...},
          "files": {
            "src/example.py": {
              "executed_lines": [1, 2, 5, 6],
              "missing_lines": [3, 4],
              "excluded_lines": [],
              "summary": {"covered_lines": 4, "num_statements": 6, ...}
            }
          },
          "totals": {...}
        }
        """
        try:
            with coverage_file.open(encoding="utf-8") as f:
                coverage_data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to parse coverage file %s: %s", coverage_file, e)
            return CoverageReport()

        if not isinstance(coverage_data, dict):
            logger.warning("Unexpected coverage.py report layout in %s", coverage_file)
            return CoverageReport()

        files: dict[str, FileCoverage] = {}
        for file_path, file_data in coverage_data.get("files", {}).items():
            if isinstance(file_data, dict):
                files[file_path] = FileCoverage(
                    file_path=file_path,
                    lines=self._parse_line_coverage(file_data),
                )

        logger.debug("Parsed %d files from %s", len(files), coverage_file)
        return CoverageReport(files=files)

    def _parse_line_coverage(self, data: dict[str, Any]) -> list[LineCoverage]:
        """Extract line coverage from coverage.py data."""
        executed_lines = set(data.get("executed_lines", []))
        missing_lines = set(data.get("missing_lines", []))

        lines = []
        for line_num in sorted(executed_lines | missing_lines):
            execution_count = 1 if line_num in executed_lines else 0
            lines.append(LineCoverage(line_number=line_num, execution_count=execution_count))

        return lines
