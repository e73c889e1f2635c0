"""JaCoCo coverage adapter for Java projects.

JaCoCo is the standard coverage tool for JVM projects. Gradle (jacoco plugin)
and Maven (jacoco-maven-plugin) both write the same XML report.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from defusedxml import ElementTree
from defusedxml.ElementTree import ParseError as DefusedParseError

from covwatch.adapters.coverage.base import (
    CoverageAdapter,
    CoverageReport,
    FileCoverage,
    LineCoverage,
)

if TYPE_CHECKING:
    from pathlib import Path
    from xml.etree.ElementTree import Element as XmlElement

logger = logging.getLogger(__name__)

# JaCoCo report paths (Gradle: build/reports/jacoco/...; Maven: target/site/jacoco/jacoco.xml)
_JACOCO_PATHS = (
    "build/reports/jacoco/test/jacocoTestReport.xml",
    "build/reports/jacoco/test/jacoco.xml",
    "target/site/jacoco/jacoco.xml",
)

# Source roots JaCoCo package paths are relative to
_SOURCE_ROOTS = ("src/main/java", "src/main/kotlin")


def _int_attr(element: XmlElement, key: str, default: int = 0) -> int:
    value = element.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_sourcefile(sourcefile: XmlElement) -> list[LineCoverage]:
    """Line entries of a ``<sourcefile>``; ``ci`` is the covered instruction count."""
    lines: list[LineCoverage] = []
    for line_elem in sourcefile.findall("line"):
        nr = _int_attr(line_elem, "nr")
        mi = _int_attr(line_elem, "mi")
        ci = _int_attr(line_elem, "ci")
        if mi + ci == 0:
            continue
        lines.append(LineCoverage(line_number=nr, execution_count=ci))

    if lines:
        return lines

    # Reports generated without line info only carry the LINE counter
    for counter in sourcefile.findall("counter"):
        if counter.get("type") == "LINE":
            covered = _int_attr(counter, "covered")
            total = covered + _int_attr(counter, "missed")
            return [
                LineCoverage(line_number=i + 1, execution_count=1 if i < covered else 0)
                for i in range(total)
            ]
    return []


def _parse_jacoco_xml(coverage_file: Path, source_root: str = _SOURCE_ROOTS[0]) -> CoverageReport:
    """Parse JaCoCo XML report into unified CoverageReport."""
    try:
        tree = ElementTree.parse(coverage_file)
    except (DefusedParseError, OSError) as e:
        logger.error("Failed to parse JaCoCo XML %s: %s", coverage_file, e)
        return CoverageReport()

    root = tree.getroot()
    if root.tag != "report":
        logger.warning("JaCoCo XML root is not <report>: %s", root.tag)
        return CoverageReport()

    files: dict[str, FileCoverage] = {}
    for package in root.iter("package"):
        package_path = package.get("name", "").strip("/")
        for sourcefile in package.findall("sourcefile"):
            name = sourcefile.get("name", "")
            if not name:
                continue
            file_path = "/".join(p for p in (source_root, package_path, name) if p)
            lines = _parse_sourcefile(sourcefile)
            if file_path in files:
                files[file_path].lines.extend(lines)
            else:
                files[file_path] = FileCoverage(file_path=file_path, lines=lines)

    return CoverageReport(files=files)


class JaCoCoAdapter(CoverageAdapter):
    """JaCoCo coverage adapter for Java projects."""

    def __init__(self, source_root: str = _SOURCE_ROOTS[0]) -> None:
        """Initialize the adapter.

        Args:
            source_root: Directory, relative to the project root, that JaCoCo
                package paths are resolved against.
        """
        self._source_root = source_root.strip("/")

    @property
    def name(self) -> str:
        return "jacoco"

    @property
    def language(self) -> str:
        return "java"

    @property
    def report_paths(self) -> tuple[str, ...]:
        return _JACOCO_PATHS

    def can_parse(self, coverage_file: Path) -> bool:
        return coverage_file.suffix == ".xml"

    def parse_coverage_file(self, coverage_file: Path) -> CoverageReport:
        """Parse JaCoCo XML report into unified CoverageReport."""
        return _parse_jacoco_xml(coverage_file, self._source_root)
