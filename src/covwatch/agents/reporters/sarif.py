"""SARIF reporter for coverage regressions, as Static Analysis Results Interchange Format.

Produces SARIF v2.1.0 JSON so regressions show up in GitHub Code Scanning,
VS Code and other SARIF consumers.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from covwatch import __version__
from covwatch.rules import rule_definitions

if TYPE_CHECKING:
    from pathlib import Path

    from covwatch.models.coverage import CoverageIssue
    from covwatch.rules import RuleDefinition

logger = logging.getLogger(__name__)

_SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/main/sarif-2.1/schema/sarif-schema-2.1.0.json"
_SARIF_VERSION = "2.1.0"
_TOOL_NAME = "covwatch"


class SARIFReporter:
    """Generate SARIF v2.1.0 reports from coverage regression issues."""

    def generate(self, issues: list[CoverageIssue], output_path: Path) -> Path:
        """Write a SARIF JSON report file.

        Args:
            issues: Issues raised by the regression watcher.
            output_path: Path to write the SARIF JSON file.

        Returns:
            The path to the generated SARIF file.
        """
        sarif = _build_sarif(issues)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            json.dumps(sarif, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info("SARIF report written to %s", output_path)
        return output_path

    def generate_string(self, issues: list[CoverageIssue]) -> str:
        """Return SARIF JSON as a string."""
        return json.dumps(_build_sarif(issues), indent=2, ensure_ascii=False)


def _build_sarif(issues: list[CoverageIssue]) -> dict[str, Any]:
    """Build a SARIF v2.1.0 document; only rules with results are listed."""
    definitions = {str(definition.key): definition for definition in rule_definitions()}
    rules: dict[str, dict[str, Any]] = {}
    results: list[dict[str, Any]] = []

    for issue in issues:
        rule_id = str(issue.rule_key)
        if rule_id not in rules:
            rules[rule_id] = _build_rule(rule_id, definitions.get(rule_id))
        results.append(_build_result(issue))

    return {
        "$schema": _SARIF_SCHEMA,
        "version": _SARIF_VERSION,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": _TOOL_NAME,
                        "version": __version__,
                        "rules": list(rules.values()),
                    },
                },
                "results": results,
            },
        ],
    }


def _build_rule(rule_id: str, definition: RuleDefinition | None) -> dict[str, Any]:
    """Build a SARIF ``reportingDescriptor`` (rule)."""
    if definition is None:
        return {"id": rule_id}
    return {
        "id": rule_id,
        "name": definition.name,
        "shortDescription": {"text": definition.name},
        "fullDescription": {"text": definition.description},
        "properties": {"language": definition.language},
    }


def _build_result(issue: CoverageIssue) -> dict[str, Any]:
    """Build a SARIF ``result`` from an issue."""
    return {
        "ruleId": str(issue.rule_key),
        "level": _map_severity(issue.severity),
        "message": {"text": issue.message},
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {"uri": issue.file_path},
                },
            },
        ],
    }


def _map_severity(severity: str) -> str:
    """Map a rule severity to a SARIF level string."""
    mapping: dict[str, str] = {
        "BLOCKER": "error",
        "CRITICAL": "error",
        "MAJOR": "warning",
        "MINOR": "note",
        "INFO": "note",
    }
    return mapping.get(severity.upper(), "warning")
