"""Istanbul/c8 coverage adapter for JavaScript/TypeScript projects.

Istanbul is the de facto standard coverage tool for JS/TS. Vitest, Jest and
c8 all write its ``coverage-final.json``.
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

# Coverage file locations (Istanbul standard paths)
_COVERAGE_PATHS = (
    "coverage/coverage-final.json",
    ".nyc_output/coverage-final.json",
)


# ── Adapter ──────────────────────────────────────────────────────


class IstanbulAdapter(CoverageAdapter):
    """Istanbul coverage adapter for JavaScript/TypeScript."""

    # ── Identity ─────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return "istanbul"

    @property
    def language(self) -> str:
        return "javascript"

    @property
    def report_paths(self) -> tuple[str, ...]:
        return _COVERAGE_PATHS

    def can_parse(self, coverage_file: Path) -> bool:
        return coverage_file.name == "coverage-final.json"

    # ── Coverage parsing ─────────────────────────────────────────

    def parse_coverage_file(self, coverage_file: Path) -> CoverageReport:
        """Parse Istanbul JSON coverage format into unified report.

        Istanbul format:
        {
          "/path/to/file.ts": {
            "path": "/path/to/file.ts",
            "statementMap": { "0": {"start": {"line": 1, ...}, ...}, ... },
            "s": { "0": 1, "1": 0, ... }  // statement hit counts
          }
        }
        """
        try:
            with coverage_file.open(encoding="utf-8") as f:
                istanbul_data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to parse coverage file %s: %s", coverage_file, e)
            return CoverageReport()

        if not isinstance(istanbul_data, dict):
            logger.warning("Unexpected Istanbul report layout in %s", coverage_file)
            return CoverageReport()

        files: dict[str, FileCoverage] = {}
        for file_path, file_data in istanbul_data.items():
            if not isinstance(file_data, dict):
                continue
            path = str(file_data.get("path", file_path))
            files[path] = FileCoverage(file_path=path, lines=self._parse_line_coverage(file_data))

        return CoverageReport(files=files)

    def _parse_line_coverage(self, data: dict[str, Any]) -> list[LineCoverage]:
        """Extract line coverage from Istanbul statement data."""
        statement_map = data.get("statementMap", {})
        statement_counts = data.get("s", {})

        lines: dict[int, int] = {}

        # Aggregate statement hits by line number
        for stmt_id, count in statement_counts.items():
            stmt_info = statement_map.get(stmt_id, {})
            line = stmt_info.get("start", {}).get("line")
            if line is not None:
                lines[line] = lines.get(line, 0) + int(count)

        return [
            LineCoverage(line_number=line_num, execution_count=count)
            for line_num, count in sorted(lines.items())
        ]
