"""JSON reporter: structured output of a coverage regression run.

Produces machine-readable JSON for downstream tooling (CI gates, dashboards).
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from covwatch import __version__

if TYPE_CHECKING:
    from pathlib import Path

    from covwatch.agents.watchers.coverage import CoverageRegressionResult
    from covwatch.models.store import CoverageProjectStore

logger = logging.getLogger(__name__)


class JSONReporter:
    """Serialize the issues and project totals of a run into one JSON document."""

    def generate(
        self,
        output_path: Path,
        result: CoverageRegressionResult,
        store: CoverageProjectStore,
        *,
        project_key: str = "",
    ) -> Path:
        """Write a JSON report file.

        Args:
            output_path: Path to write the JSON file.
            result: Outcome of the regression watcher.
            store: Project totals accumulated during the run.
            project_key: Key of the analyzed project.

        Returns:
            The path to the generated JSON file.
        """
        report = build_report(result, store, project_key=project_key)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            json.dumps(report, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info("JSON report written to %s", output_path)
        return output_path

    def generate_string(
        self,
        result: CoverageRegressionResult,
        store: CoverageProjectStore,
        *,
        project_key: str = "",
    ) -> str:
        """Return the JSON report as a string."""
        report = build_report(result, store, project_key=project_key)
        return json.dumps(report, indent=2, ensure_ascii=False)


def build_report(
    result: CoverageRegressionResult,
    store: CoverageProjectStore,
    *,
    project_key: str = "",
) -> dict[str, Any]:
    """Build the JSON report structure."""
    return {
        "tool": "covwatch",
        "version": __version__,
        "timestamp": datetime.now(tz=UTC).isoformat(),
        "project": {
            "key": project_key,
            "lines_to_cover": store.lines_to_cover,
            "uncovered_lines": store.uncovered_lines,
            "line_coverage": store.project_coverage,
            "previous_line_coverage": store.previous_project_coverage,
        },
        "summary": {
            "files_analyzed": result.files_analyzed,
            "files_measured": result.files_measured,
            "files_with_baseline": result.files_with_baseline,
            "regressions": len(result.regressions),
            "issues": len(result.issues),
        },
        "issues": [
            {
                "rule": str(issue.rule_key),
                "severity": issue.severity,
                "file": issue.file_path,
                "message": issue.message,
            }
            for issue in result.issues
        ],
        "skipped": list(result.skipped),
    }
