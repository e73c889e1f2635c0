"""Tests for config.py — .covwatch.yml parsing and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from covwatch.config import (
    CONFIG_FILENAME,
    CoverageConfig,
    CovwatchConfig,
    MetricsConfig,
    ProjectConfig,
    ReportConfig,
    RulesConfig,
    _parse_coverage_config,
    _parse_metrics_config,
    _parse_rules_config,
    _resolve_dict,
    _resolve_env_vars,
    _validate_metrics_config,
    _validate_rules_config,
    load_config,
    validate_config,
)
from covwatch.rules import default_active_rules

_ENV_VARS = (
    "COVWATCH_PROJECT_KEY",
    "COVWATCH_METRICS_URL",
    "COVWATCH_METRICS_TOKEN",
    "COVWATCH_METRICS_LOGIN",
    "COVWATCH_METRICS_PASSWORD",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write_covwatch_yml(root: Path, data: dict[str, Any]) -> None:
    """Write .covwatch.yml with given data."""
    (root / CONFIG_FILENAME).write_text(yaml.dump(data), encoding="utf-8")


def _valid_config(tmp_path: Path) -> CovwatchConfig:
    return CovwatchConfig(
        project=ProjectConfig(root=str(tmp_path), key="acme"),
        metrics=MetricsConfig(url="https://sonar.example.com"),
    )


# ── _resolve_env_vars / _resolve_dict ─────────────────────────────────


class TestResolveEnvVars:
    def test_resolves_existing_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _resolve_env_vars("${MY_VAR}") == "hello"

    def test_missing_var_returns_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MISSING_VAR", raising=False)
        assert _resolve_env_vars("${MISSING_VAR}") == ""

    def test_no_vars_unchanged(self) -> None:
        assert _resolve_env_vars("plain text") == "plain text"

    def test_resolve_dict_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SONAR_TOKEN", "squ_123")
        data = {"metrics": {"token": "${SONAR_TOKEN}", "timeout": 5}, "list": ["${SONAR_TOKEN}"]}

        resolved = _resolve_dict(data)

        assert resolved["metrics"] == {"token": "squ_123", "timeout": 5}
        assert resolved["list"] == ["squ_123"]


# ── Section parsers ──────────────────────────────────────────────────


class TestParseCoverageConfig:
    def test_defaults(self) -> None:
        config = _parse_coverage_config({})
        assert config.notify_regressions is True
        assert config.reports == []

    def test_disabled(self) -> None:
        config = _parse_coverage_config({"coverage": {"notify_regressions": False}})
        assert config.notify_regressions is False

    def test_string_flag(self) -> None:
        enabled = _parse_coverage_config({"coverage": {"notify_regressions": "true"}})
        assert enabled.notify_regressions
        assert not _parse_coverage_config(
            {"coverage": {"notify_regressions": "no"}}
        ).notify_regressions

    @pytest.mark.parametrize("value", ["True", "TRUE", " on ", "Yes", "1"])
    def test_flag_is_case_insensitive(self, value: str) -> None:
        config = _parse_coverage_config({"coverage": {"notify_regressions": value}})
        assert config.notify_regressions is True

    @pytest.mark.parametrize("value", ["False", "OFF", "No", "0"])
    def test_false_flag_is_case_insensitive(self, value: str) -> None:
        config = _parse_coverage_config({"coverage": {"notify_regressions": value}})
        assert config.notify_regressions is False

    def test_unrecognized_flag_warns_and_keeps_default(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        config = _parse_coverage_config({"coverage": {"notify_regressions": "maybe"}})

        assert config.notify_regressions is True
        assert "notify_regressions" in caplog.text

    def test_reports(self) -> None:
        config = _parse_coverage_config({"coverage": {"reports": ["coverage.json", "jacoco.xml"]}})
        assert config.reports == ["coverage.json", "jacoco.xml"]

    def test_non_mapping_section_ignored(self) -> None:
        assert _parse_coverage_config({"coverage": "yes"}) == CoverageConfig()


class TestParseMetricsConfig:
    def test_from_yaml(self) -> None:
        config = _parse_metrics_config(
            {"metrics": {"url": "https://sonar.example.com", "token": "abc", "timeout": 3}}
        )
        assert config.url == "https://sonar.example.com"
        assert config.token == "abc"
        assert config.timeout == 3.0
        assert config.is_configured

    def test_env_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COVWATCH_METRICS_URL", "https://env.example.com")
        monkeypatch.setenv("COVWATCH_METRICS_LOGIN", "ci")
        monkeypatch.setenv("COVWATCH_METRICS_PASSWORD", "secret")

        config = _parse_metrics_config({})

        assert config.url == "https://env.example.com"
        assert config.login == "ci"
        assert config.password == "secret"

    def test_not_configured_by_default(self) -> None:
        assert not _parse_metrics_config({}).is_configured


class TestParseRulesConfig:
    def test_default_is_every_builtin_rule(self) -> None:
        assert _parse_rules_config({}).active == default_active_rules()

    def test_explicit_list(self) -> None:
        rule = "coverage-evolution-java:decreasing-line-coverage"
        assert _parse_rules_config({"rules": {"active": [rule]}}).active == [rule]

    def test_empty_list_disables_all(self) -> None:
        assert _parse_rules_config({"rules": {"active": []}}).active == []


# ── load_config ──────────────────────────────────────────────────────


class TestLoadConfig:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)

        assert config.project.root == str(tmp_path.resolve())
        assert config.project.key == ""
        assert config.coverage.notify_regressions is True
        assert config.report == ReportConfig()
        assert config.raw == {}

    def test_full_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SONAR_TOKEN", "squ_abcdef123456")
        _write_covwatch_yml(
            tmp_path,
            {
                "project": {"key": "acme"},
                "coverage": {"reports": ["coverage.json"]},
                "metrics": {"url": "https://sonar.example.com", "token": "${SONAR_TOKEN}"},
                "rules": {"active": ["coverage-evolution-python:decreasing-line-coverage"]},
                "report": {"format": "json", "output": "out/report.json"},
            },
        )

        config = load_config(tmp_path)

        assert config.project.key == "acme"
        assert config.coverage.reports == ["coverage.json"]
        assert config.metrics.token == "squ_abcdef123456"
        assert config.rules.active == ["coverage-evolution-python:decreasing-line-coverage"]
        assert config.report.format == "json"
        assert config.report.output == "out/report.json"

    def test_env_expanded_flag(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NOTIFY", "False")
        _write_covwatch_yml(tmp_path, {"coverage": {"notify_regressions": "${NOTIFY}"}})
        assert load_config(tmp_path).coverage.notify_regressions is False

        monkeypatch.setenv("NOTIFY", "True")
        assert load_config(tmp_path).coverage.notify_regressions is True

    def test_empty_values_fall_back_to_defaults(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text(
            "project:\n  key:\n  root:\nmetrics:\n  url:\n  timeout:\nreport:\n  format:\n",
            encoding="utf-8",
        )

        config = load_config(tmp_path)

        assert config.project.key == ""
        assert config.project.root == str(tmp_path.resolve())
        assert config.metrics.url == ""
        assert config.metrics.timeout == 15.0
        assert config.report.format == "terminal"

    def test_project_root_relative_to_config_file(self, tmp_path: Path) -> None:
        _write_covwatch_yml(tmp_path, {"project": {"root": "app"}})
        assert load_config(tmp_path).project.root == str((tmp_path / "app").resolve())

    def test_absolute_project_root(self, tmp_path: Path) -> None:
        other = tmp_path / "elsewhere"
        _write_covwatch_yml(tmp_path, {"project": {"root": str(other)}})
        assert load_config(tmp_path).project.root == str(other.resolve())

    def test_project_key_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COVWATCH_PROJECT_KEY", "from-env")
        assert load_config(tmp_path).project.key == "from-env"

    def test_non_mapping_yaml_ignored(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("- just\n- a list\n", encoding="utf-8")
        assert load_config(tmp_path).raw == {}

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("project: [unclosed\n", encoding="utf-8")
        with pytest.raises(yaml.YAMLError):
            load_config(tmp_path)


# ── Validation ───────────────────────────────────────────────────────


class TestValidateMetricsConfig:
    def test_valid(self) -> None:
        assert _validate_metrics_config(MetricsConfig(url="http://localhost:9000")) == []

    def test_bad_scheme(self) -> None:
        errors = _validate_metrics_config(MetricsConfig(url="sonar.example.com"))
        assert len(errors) == 1
        assert "http://" in errors[0]

    def test_password_without_login(self) -> None:
        errors = _validate_metrics_config(MetricsConfig(url="https://x", password="secret"))
        assert errors == ["metrics.login is required when metrics.password is set"]

    def test_non_positive_timeout(self) -> None:
        errors = _validate_metrics_config(MetricsConfig(url="https://x", timeout=0))
        assert "metrics.timeout" in errors[0]


class TestValidateRulesConfig:
    def test_valid(self) -> None:
        assert _validate_rules_config(RulesConfig()) == []

    def test_malformed_key(self) -> None:
        errors = _validate_rules_config(RulesConfig(active=["not-a-rule"]))
        assert len(errors) == 1
        assert errors[0].startswith("rules.active:")


class TestValidateConfig:
    def test_valid(self, tmp_path: Path) -> None:
        assert validate_config(_valid_config(tmp_path)) == []

    def test_key_and_url_required_when_enabled(self, tmp_path: Path) -> None:
        config = CovwatchConfig(project=ProjectConfig(root=str(tmp_path)))

        errors = validate_config(config)

        assert any("project.key" in e for e in errors)
        assert any("metrics.url" in e for e in errors)

    def test_disabled_needs_no_connection(self, tmp_path: Path) -> None:
        config = CovwatchConfig(
            project=ProjectConfig(root=str(tmp_path)),
            coverage=CoverageConfig(notify_regressions=False),
        )
        assert validate_config(config) == []

    def test_unknown_report_format(self, tmp_path: Path) -> None:
        config = _valid_config(tmp_path)
        config.report = ReportConfig(format="html")

        errors = validate_config(config)

        assert len(errors) == 1
        assert "report.format" in errors[0]

    def test_unrecognized_flag(self, tmp_path: Path) -> None:
        config = _valid_config(tmp_path)
        config.raw = {"coverage": {"notify_regressions": "maybe"}}

        errors = validate_config(config)

        assert len(errors) == 1
        assert "coverage.notify_regressions" in errors[0]
