"""Configuration parsing from ``.covwatch.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from covwatch.models.coverage import RuleKey
from covwatch.rules import default_active_rules

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".covwatch.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

REPORT_FORMATS = ("terminal", "json", "sarif")

_TRUTHY = frozenset({"true", "1", "yes", "on"})
_FALSY = frozenset({"false", "0", "no", "off"})


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {})
    return value if isinstance(value, dict) else {}


def _string_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(item) for item in value]
    return []


def _string_value(section: dict[str, Any], key: str, default: str = "") -> str:
    """Return *key* as a string; a missing or empty YAML value yields *default*."""
    value = section.get(key)
    return default if value is None else str(value)


def _parse_flag(value: Any) -> bool | None:
    """Interpret a YAML or env-expanded boolean; None when it is neither."""
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    return None


@dataclass
class ProjectConfig:
    """Project-level configuration."""

    root: str
    """Project root directory."""

    key: str = ""
    """Project key on the metrics service; file keys are ``<key>:<relative path>``."""


@dataclass
class CoverageConfig:
    """Coverage regression detection configuration."""

    notify_regressions: bool = True
    """Report files whose line coverage dropped since the previous analysis."""

    reports: list[str] = field(default_factory=list)
    """Coverage report files to read (empty = auto-detect)."""


@dataclass
class MetricsConfig:
    """Connection to the metrics service holding previously published coverage."""

    url: str = ""
    """Base URL of the metrics service (e.g., https://sonar.example.com)."""

    token: str = ""
    """API token (supports ${ENV_VAR} expansion). Takes precedence over login/password."""

    login: str = ""
    """Login for basic authentication."""

    password: str = ""
    """Password for basic authentication."""

    timeout: float = 15.0
    """Request timeout in seconds."""

    @property
    def is_configured(self) -> bool:
        return bool(self.url)


@dataclass
class RulesConfig:
    """Active rule set."""

    active: list[str] = field(default_factory=default_active_rules)
    """Active rules as ``repository:rule`` strings (default: every built-in rule)."""


@dataclass
class ReportConfig:
    """Reporting and output configuration."""

    format: str = "terminal"
    """Output format: terminal, json, or sarif."""

    output: str = ""
    """Output file for json/sarif (empty = stdout)."""


@dataclass
class CovwatchConfig:
    """Complete covwatch configuration from ``.covwatch.yml``."""

    project: ProjectConfig
    """Project configuration."""

    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    """Coverage regression configuration."""

    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    """Metrics service configuration."""

    rules: RulesConfig = field(default_factory=RulesConfig)
    """Active rules configuration."""

    report: ReportConfig = field(default_factory=ReportConfig)
    """Reporting configuration."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML for extension/debugging."""


def _parse_coverage_config(raw: dict[str, Any]) -> CoverageConfig:
    """Parse coverage configuration from raw YAML."""
    coverage_raw = _section(raw, "coverage")

    value = coverage_raw.get("notify_regressions", True)
    notify = _parse_flag(value)
    if notify is None:
        logger.warning(
            "Unrecognized coverage.notify_regressions value %r, keeping the default (true)", value
        )
        notify = True

    return CoverageConfig(
        notify_regressions=notify,
        reports=_string_list(coverage_raw.get("reports", [])),
    )


def _parse_metrics_config(raw: dict[str, Any]) -> MetricsConfig:
    """Parse metrics service configuration from raw YAML."""
    metrics_raw = _section(raw, "metrics")

    timeout = metrics_raw.get("timeout")

    return MetricsConfig(
        url=_string_value(metrics_raw, "url", os.environ.get("COVWATCH_METRICS_URL", "")),
        token=_string_value(metrics_raw, "token", os.environ.get("COVWATCH_METRICS_TOKEN", "")),
        login=_string_value(metrics_raw, "login", os.environ.get("COVWATCH_METRICS_LOGIN", "")),
        password=_string_value(
            metrics_raw, "password", os.environ.get("COVWATCH_METRICS_PASSWORD", "")
        ),
        timeout=15.0 if timeout is None else float(timeout),
    )


def _parse_rules_config(raw: dict[str, Any]) -> RulesConfig:
    """Parse the active rule list from raw YAML."""
    rules_raw = _section(raw, "rules")
    if "active" not in rules_raw:
        return RulesConfig()
    return RulesConfig(active=_string_list(rules_raw.get("active")))


def load_config(root: str | Path) -> CovwatchConfig:
    """Load and parse the complete ``.covwatch.yml`` configuration.

    Falls back to defaults and environment variables when the YAML file is
    missing or incomplete.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        text = config_file.read_text(encoding="utf-8")
        parsed = yaml.safe_load(text)
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)

    project_raw = _section(raw, "project")
    # project.root is relative to the directory holding the configuration file
    project_root = _string_value(project_raw, "root")
    project = ProjectConfig(
        root=str((root_path / project_root).resolve()) if project_root else str(root_path),
        key=_string_value(project_raw, "key", os.environ.get("COVWATCH_PROJECT_KEY", "")),
    )

    report_raw = _section(raw, "report")
    report = ReportConfig(
        format=_string_value(report_raw, "format", "terminal"),
        output=_string_value(report_raw, "output"),
    )

    return CovwatchConfig(
        project=project,
        coverage=_parse_coverage_config(raw),
        metrics=_parse_metrics_config(raw),
        rules=_parse_rules_config(raw),
        report=report,
        raw=raw,
    )


def _validate_metrics_config(metrics: MetricsConfig) -> list[str]:
    """Validate metrics service configuration."""
    errors: list[str] = []

    if metrics.url and not metrics.url.startswith(("http://", "https://")):
        errors.append(f"metrics.url must start with http:// or https:// (got: {metrics.url})")

    if metrics.password and not metrics.login:
        errors.append("metrics.login is required when metrics.password is set")

    if metrics.timeout <= 0:
        errors.append(f"metrics.timeout must be positive (got: {metrics.timeout})")

    return errors


def _validate_coverage_config(raw: dict[str, Any]) -> list[str]:
    """Validate the raw coverage flag, which parsing falls back on silently."""
    value = _section(raw, "coverage").get("notify_regressions", True)
    if _parse_flag(value) is None:
        return [f"coverage.notify_regressions must be true or false (got: {value!r})"]
    return []


def _validate_rules_config(rules: RulesConfig) -> list[str]:
    """Validate that every active rule is a ``repository:rule`` key."""
    errors: list[str] = []
    for value in rules.active:
        try:
            RuleKey.parse(value)
        except ValueError as e:
            errors.append(f"rules.active: {e}")
    return errors


def _validate_report_config(report: ReportConfig) -> list[str]:
    if report.format not in REPORT_FORMATS:
        return [
            f"report.format must be one of {', '.join(REPORT_FORMATS)} "
            f"(got: {report.format})"
        ]
    return []


def validate_config(config: CovwatchConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.project.root:
        errors.append("project.root is required")

    if config.coverage.notify_regressions:
        if not config.project.key:
            errors.append("project.key is required when coverage.notify_regressions is true")
        if not config.metrics.is_configured:
            errors.append("metrics.url is required when coverage.notify_regressions is true")

    errors.extend(_validate_coverage_config(config.raw))
    errors.extend(_validate_metrics_config(config.metrics))
    errors.extend(_validate_rules_config(config.rules))
    errors.extend(_validate_report_config(config.report))

    return errors
