"""Rule definitions for coverage regressions and the run gate built on them.

Each supported language owns a rule repository named
``coverage-evolution-<language>`` holding a single
``decreasing-line-coverage`` rule. Files in languages without a dedicated
repository report against ``coverage-evolution-generic``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from covwatch.models.coverage import RuleKey

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from covwatch.config import CoverageConfig

logger = logging.getLogger(__name__)

REPOSITORY_PREFIX = "coverage-evolution-"
DECREASING_LINE_COVERAGE_KEY = "decreasing-line-coverage"
GENERIC_LANGUAGE = "generic"

SUPPORTED_LANGUAGES: tuple[str, ...] = (
    "c",
    "cpp",
    "csharp",
    "go",
    "java",
    "javascript",
    "python",
    "rust",
    "tsx",
    "typescript",
)


@dataclass(frozen=True)
class RuleDefinition:
    """Static description of a rule, as published to review tools."""

    key: RuleKey
    name: str
    description: str
    severity: str = "MAJOR"
    language: str = GENERIC_LANGUAGE


def repository_for_language(language: str) -> str:
    """Return the rule repository for *language*, falling back to the generic one."""
    normalized = language.strip().lower()
    if normalized not in SUPPORTED_LANGUAGES:
        normalized = GENERIC_LANGUAGE
    return REPOSITORY_PREFIX + normalized


def decreasing_line_coverage_rule(language: str) -> RuleKey:
    """Return the rule key used for line coverage drops in *language* files."""
    return RuleKey(repository=repository_for_language(language), rule=DECREASING_LINE_COVERAGE_KEY)


def rule_definitions() -> list[RuleDefinition]:
    """Return the definition of every built-in rule, generic fallback included."""
    return [
        RuleDefinition(
            key=decreasing_line_coverage_rule(language),
            name="Decreasing line coverage",
            description=(
                "Raised when the line coverage of a file is lower than the value "
                "published by the previous analysis."
            ),
            language=language,
        )
        for language in (*SUPPORTED_LANGUAGES, GENERIC_LANGUAGE)
    ]


def default_active_rules() -> list[str]:
    """Return the string form of every built-in rule key."""
    return [str(definition.key) for definition in rule_definitions()]


class ActiveRules:
    """The set of rules enabled for the current analysis."""

    def __init__(self, keys: Iterable[RuleKey] = ()) -> None:
        self._keys = frozenset(keys)

    @classmethod
    def from_strings(cls, values: Iterable[str]) -> ActiveRules:
        """Build the set from ``repository:rule`` strings.

        Raises:
            ValueError: If a value is not a valid rule key.
        """
        return cls(RuleKey.parse(value) for value in values)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[RuleKey]:
        return iter(sorted(self._keys, key=str))

    def __len__(self) -> int:
        return len(self._keys)

    def find_by_repository(self, repository: str) -> list[RuleKey]:
        return [key for key in self if key.repository == repository]


def active_coverage_rules(active_rules: ActiveRules) -> list[RuleKey]:
    """Return the active rules able to report a decreasing line coverage."""
    return [
        key
        for key in active_rules
        if key.repository.startswith(REPOSITORY_PREFIX) and key.rule == DECREASING_LINE_COVERAGE_KEY
    ]


def should_execute_coverage(config: CoverageConfig, active_rules: ActiveRules) -> bool:
    """Return True when coverage regressions are enabled and at least one rule can carry them."""
    if not config.notify_regressions:
        logger.debug("Coverage regression detection disabled by configuration")
        return False
    if not active_coverage_rules(active_rules):
        logger.debug("No active decreasing line coverage rule, skipping coverage analysis")
        return False
    return True
