"""Top-level covwatch command group."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import asdict
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
import yaml

from covwatch import __version__
from covwatch.adapters.measures import ReportMeasureProvider, load_coverage_reports
from covwatch.agents.detectors.files import FileSystem
from covwatch.agents.reporters.json_reporter import JSONReporter
from covwatch.agents.reporters.sarif import SARIFReporter
from covwatch.agents.reporters.sink import ReviewIssueCollector
from covwatch.agents.reporters.terminal import console, reporter
from covwatch.agents.watchers.coverage import CoverageRegressionResult, CoverageRegressionWatcher
from covwatch.config import REPORT_FORMATS, CovwatchConfig, load_config, validate_config
from covwatch.models.store import CoverageProjectStore
from covwatch.rules import ActiveRules
from covwatch.utils.metrics_client import MetricsClient, MetricsClientError, get_line_coverage

if TYPE_CHECKING:
    from collections.abc import Callable

    from covwatch.adapters.coverage import CoverageReport
    from covwatch.config import MetricsConfig
    from covwatch.models.coverage import InputFile, Metric

logger = logging.getLogger(__name__)

# Masking thresholds
_MIN_MASKED_VALUE_LENGTH = 8

_SENSITIVE_KEYS = frozenset({"token", "password"})


def _config_to_dict(config: CovwatchConfig) -> dict[str, Any]:
    """Convert CovwatchConfig to dictionary for display."""
    result = asdict(config)
    # Remove the raw field as it's redundant
    result.pop("raw", None)
    return result


def _mask_sensitive_values(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Recursively mask sensitive values in a configuration dict."""

    def _mask(data: dict[str, Any]) -> dict[str, Any]:
        masked: dict[str, Any] = {}
        for key, value in data.items():
            if key in _SENSITIVE_KEYS and isinstance(value, str) and value:
                if len(value) > _MIN_MASKED_VALUE_LENGTH:
                    masked[key] = f"{value[:4]}...{value[-4:]}"
                else:
                    masked[key] = "***"
            elif isinstance(value, dict):
                masked[key] = _mask(value)
            else:
                masked[key] = value
        return masked

    return _mask(config_dict)


def _load_config_or_abort(path: str) -> CovwatchConfig:
    try:
        return load_config(path)
    except (OSError, yaml.YAMLError, ValueError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e


def _write_output(content: str, output: str) -> None:
    if output:
        out_path = Path(output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(content, encoding="utf-8")
        reporter.print_success(f"Report written to {out_path}")
    else:
        click.echo(content)


def _emit_report(
    config: CovwatchConfig,
    result: CoverageRegressionResult,
    store: CoverageProjectStore,
    *,
    output_format: str,
    output: str,
) -> None:
    if output_format == "json":
        content = JSONReporter().generate_string(result, store, project_key=config.project.key)
        _write_output(content, output)
    elif output_format == "sarif":
        _write_output(SARIFReporter().generate_string(result.issues), output)
    else:
        reporter.print_header(
            f"covwatch: line coverage of {config.project.key or config.project.root}"
        )
        reporter.print_project_summary(store, config.project.key)
        reporter.print_regressions(result)


def _previous_coverage_lookup(config: MetricsConfig) -> Callable[[str], float | None]:
    """Return a lookup that connects to the metrics service on first use."""
    client: MetricsClient | None = None

    def _lookup(resource_key: str) -> float | None:
        nonlocal client
        if client is None:
            client = MetricsClient.from_config(config)
        return get_line_coverage(client, resource_key)

    return _lookup


class _LazyMeasures:
    """Measure lookup that parses the coverage reports on first use."""

    def __init__(self, load: Callable[[], CoverageReport]) -> None:
        self._load = load
        self._provider: ReportMeasureProvider | None = None

    def get_measure(self, file: InputFile, metric: Metric) -> int | None:
        if self._provider is None:
            self._provider = ReportMeasureProvider(self._load())
        return self._provider.get_measure(file, metric)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="covwatch")
def cli(*, verbose: bool) -> None:
    """Report files whose line coverage went down."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
@click.option(
    "--report",
    "reports",
    multiple=True,
    type=click.Path(dir_okay=False),
    help="Coverage report to read (repeatable). Defaults to coverage.reports or auto-detection.",
)
@click.option("--project-key", default=None, help="Override project.key from the configuration.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(REPORT_FORMATS),
    default=None,
    help="Output format (default: report.format).",
)
@click.option("--output", default=None, help="Write json/sarif output to this file.")
@click.option(
    "--scope",
    multiple=True,
    help="Restrict issues to these project-relative files (repeatable), e.g. the files of a PR.",
)
@click.option(
    "--exclude",
    multiple=True,
    help="Glob of project-relative files to ignore (repeatable).",
)
@click.option(
    "--fail-on-regression",
    is_flag=True,
    help="Exit with status 1 when at least one issue was raised.",
)
def check(
    path: str,
    reports: tuple[str, ...],
    project_key: str | None,
    output_format: str | None,
    output: str | None,
    scope: tuple[str, ...],
    exclude: tuple[str, ...],
    *,
    fail_on_regression: bool,
) -> None:
    """Compare per-file line coverage with the previous analysis.

    Example:
      covwatch check --report coverage.json --fail-on-regression
    """
    config = _load_config_or_abort(path)
    if project_key is not None:
        config.project.key = project_key
    output_format = output_format or config.report.format
    output = output if output is not None else config.report.output
    if output_format not in REPORT_FORMATS:
        reporter.print_error(
            f"report.format must be one of {', '.join(REPORT_FORMATS)} (got: {output_format})"
        )
        raise click.Abort

    try:
        active_rules = ActiveRules.from_strings(config.rules.active)
    except ValueError as e:
        reporter.print_error(str(e))
        raise click.Abort from e

    root = Path(config.project.root)
    store = CoverageProjectStore()
    previous_coverage = _previous_coverage_lookup(config.metrics)
    report_files = list(reports) or config.coverage.reports

    watcher = CoverageRegressionWatcher(
        FileSystem(root, exclude=exclude).input_files(),
        _LazyMeasures(partial(load_coverage_reports, root, report_files)),
        previous_coverage,
        ReviewIssueCollector(scope or None),
        store,
        config=config.coverage,
        active_rules=active_rules,
        project_key=config.project.key,
    )

    if not watcher.should_execute():
        reporter.print_info("Coverage regression detection is disabled for this project.")
        return

    try:
        if config.project.key:
            store.previous_project_coverage = previous_coverage(config.project.key)
        result = watcher.analyse()
    except MetricsClientError as e:
        reporter.print_error(str(e))
        sys.exit(1)

    _emit_report(config, result, store, output_format=output_format, output=output)

    if fail_on_regression and result.issues:
        sys.exit(1)


@cli.group("config")
def config_group() -> None:
    """Inspect `.covwatch.yml` configuration."""


@config_group.command("show")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Output as JSON instead of YAML.",
)
@click.option(
    "--no-mask",
    is_flag=True,
    help="Show sensitive values unmasked (use with caution).",
)
def config_show(path: str, *, as_json: bool, no_mask: bool) -> None:
    """Display resolved configuration with masked sensitive values.

    Example:
      covwatch config show --json-output
    """
    config = _load_config_or_abort(path)

    config_dict = _config_to_dict(config)
    if not no_mask:
        config_dict = _mask_sensitive_values(config_dict)

    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        console.print()
        console.print("[bold cyan]Configuration:[/bold cyan]")
        console.print()
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
def config_validate(path: str) -> None:
    """Validate `.covwatch.yml` configuration.

    Example:
      covwatch config validate
    """
    config = _load_config_or_abort(path)

    errors = validate_config(config)
    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    console.print()
    for idx, error in enumerate(errors, start=1):
        console.print(f"  {idx}. [red]{error}[/red]")
    console.print()
    raise click.Abort


def main() -> None:
    cli()
