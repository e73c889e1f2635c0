"""Per-file measures backed by parsed coverage reports."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from covwatch.adapters.coverage import (
    CoverageAdapter,
    CoveragePyAdapter,
    CoverageReport,
    IstanbulAdapter,
    JaCoCoAdapter,
)
from covwatch.models.coverage import Metric

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covwatch.adapters.coverage import FileCoverage
    from covwatch.models.coverage import InputFile

logger = logging.getLogger(__name__)


def default_adapters() -> list[CoverageAdapter]:
    """Return every built-in adapter; more specific report names come first."""
    return [IstanbulAdapter(), CoveragePyAdapter(), JaCoCoAdapter()]


def _normalize_report_path(file_path: str, project_root: Path) -> str:
    """Express a report path relative to the project root, POSIX style."""
    path = Path(file_path)
    if path.is_absolute():
        try:
            path = path.resolve().relative_to(project_root.resolve())
        except ValueError:
            return path.as_posix()
    normalized = PurePosixPath(path.as_posix())
    parts = [part for part in normalized.parts if part != "."]
    return PurePosixPath(*parts).as_posix() if parts else ""


def load_coverage_reports(
    project_root: Path,
    report_files: Sequence[str | Path] = (),
    adapters: Sequence[CoverageAdapter] | None = None,
) -> CoverageReport:
    """Parse coverage reports into one report keyed by project-relative paths.

    Args:
        project_root: Root of the analyzed project.
        report_files: Explicit report files (relative to *project_root* or
            absolute). When empty, conventional report locations are used.
        adapters: Adapters to try, defaults to :func:`default_adapters`.

    Returns:
        The merged report; empty when no report was found.
    """
    adapters = list(adapters) if adapters is not None else default_adapters()

    candidates: list[tuple[CoverageAdapter, Path]] = []
    if report_files:
        for report_file in report_files:
            path = Path(report_file)
            if not path.is_absolute():
                path = project_root / path
            adapter = next((a for a in adapters if a.can_parse(path)), None)
            if adapter is None:
                logger.warning("No coverage adapter recognizes %s, skipping", path)
                continue
            candidates.append((adapter, path))
    else:
        for adapter in adapters:
            candidates.extend((adapter, path) for path in adapter.detect(project_root))

    merged = CoverageReport()
    for adapter, path in candidates:
        if not path.is_file():
            logger.warning("Coverage report %s does not exist, skipping", path)
            continue
        logger.info("Reading %s report %s", adapter.name, path)
        parsed = adapter.parse_coverage_file(path)
        normalized = CoverageReport()
        for file_path, file_cov in parsed.files.items():
            rel = _normalize_report_path(file_path, project_root)
            normalized.merge(CoverageReport(files={rel: file_cov}))
        merged.merge(normalized)

    if not candidates:
        logger.warning("No coverage report found under %s", project_root)
    return merged


class ReportMeasureProvider:
    """Measure lookup answering from a unified coverage report.

    Files absent from the report have no measures: they were not measured by
    any coverage tool.
    """

    def __init__(self, report: CoverageReport) -> None:
        self._report = report

    def get_measure(self, file: InputFile, metric: Metric) -> int | None:
        """Return the value of *metric* for *file*, or None if it was not measured."""
        file_cov: FileCoverage | None = self._report.files.get(file.relative_path)
        if file_cov is None:
            return None
        if metric is Metric.LINES_TO_COVER:
            return file_cov.lines_to_cover
        if metric is Metric.UNCOVERED_LINES:
            return file_cov.uncovered_lines
        return None
